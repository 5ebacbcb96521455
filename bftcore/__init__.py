"""Node addressing, binary encoding, signing and reliable multicast for BFT protocols."""

__version__ = "0.1.0"