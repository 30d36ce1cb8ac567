"""MDIO Variable CLI commands."""
