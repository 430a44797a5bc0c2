"""Install apps into Aragon DAOs and deploy MiniMe tokens."""

__version__ = "0.1.0"
