"""
forkchain: an interactive multi-branch hash-chain demonstration.
"""
