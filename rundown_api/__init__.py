# Rundown API: remote collaborator contract
from .client import RundownApiClient
from .credentials import CredentialStore
from .errors import ApiError, ErrorKind, classify_error

__all__ = ["RundownApiClient", "CredentialStore", "ApiError", "ErrorKind", "classify_error"]
