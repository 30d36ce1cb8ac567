"""Core engine adapters and helpers of MDIO Variable."""
