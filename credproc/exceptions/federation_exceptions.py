class FederationException(Exception):
    """Raised when the web identity token could not be exchanged for credentials"""

    pass
