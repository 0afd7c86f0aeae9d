"""Client library for the Parse REST API."""

from .client import DEFAULT_BASE_URL, ParseClient, __version__
from .credentials import CredentialStrategy, MasterKey, RestAPIKey, SessionToken
from .errors import ErrorKind, ParseError
from .redaction import Redactor
from .settings import ParseSettings

__all__ = [
    "CredentialStrategy",
    "DEFAULT_BASE_URL",
    "ErrorKind",
    "MasterKey",
    "ParseClient",
    "ParseError",
    "ParseSettings",
    "Redactor",
    "RestAPIKey",
    "SessionToken",
    "__version__",
]
