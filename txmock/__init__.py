"""
txmock

Mock transaction execution engine and scenario verification for
MOAX/DCT smart contracts. Runs contract code in-process, without a node.
"""
__version__ = "0.4.0"
