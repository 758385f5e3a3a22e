"""Bankforge - Devalang sample bank packaging.

Turns a bank directory (bank.toml + audio/) into a .devabank archive:
- trigger discovery and deterministic name disambiguation
- comment-preserving rewrite of the [[triggers]] section
- deterministic archive assembly, single bank or batch
"""

__version__ = "0.1.0"
