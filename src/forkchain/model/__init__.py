"""
The MODEL layer contains pure data structures and chain rules.
It has NO knowledge of the GUI (Qt) or of how blocks are laid out.
It deals with Blocks, Branches, Hashing and the working BranchSet.
"""
