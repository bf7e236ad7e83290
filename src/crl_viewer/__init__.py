"""
crl_viewer — CRL retrieval and text-dump proxy.

Fetches a Certificate Revocation List from a caller-supplied URL, works out
whether it is DER, PEM or bare base64, decodes it into openssl-style text
and serves that text over HTTP with week-long caching headers.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
