"""
cert_builder — self-signed X.509v3 certificate generator.

Generates RSA/EC key pairs and issues self-signed certificates carrying
a fixed, ordered extension set (AKI, basic constraints, key usage,
extended key usage, SAN, SKI) for peers that bootstrap their own TLS
identity without a certificate authority.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
