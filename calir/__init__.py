"""Bitsets, a bump arena and open-addressing hash maps for compiler passes."""

__version__ = "0.1.0"
__all__ = ["bitset", "bump", "hashmap", "numeric_hashmap"]