"""
The VIEW layer draws the chain and forwards user intents to the Store.
It never mutates the chain itself.
"""
