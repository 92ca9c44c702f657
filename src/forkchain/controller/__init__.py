"""
The CONTROLLER layer turns user intents into new chain snapshots and turns
snapshots into diagram geometry. It has NO knowledge of the GUI (Qt).
"""
