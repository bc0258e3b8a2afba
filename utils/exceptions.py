class PGPVerifyError(Exception):
    """Base class for all errors raised while checking artifact signatures."""


class ConfigurationError(PGPVerifyError):
    """Invalid cache path, keys map rule, key server address or other setting."""


class ResourceNotFoundError(ConfigurationError):
    """The keys map resource could not be located."""


class KeyServerError(PGPVerifyError):
    """A key server request failed."""


class KeyNotFoundError(KeyServerError):
    """The key server does not know the key, or the returned ring lacks it."""


class CacheIOError(PGPVerifyError):
    """Reading or writing the keys cache directory failed."""


class SignatureFormatError(PGPVerifyError):
    """The signature file does not contain an OpenPGP signature."""


class ArtifactResolutionError(PGPVerifyError):
    """The artifact file, or its signature, could not be downloaded."""


class SignatureCheckError(PGPVerifyError):
    """At least one artifact failed the signature check."""


def find_cause(error, error_type):
    """
    Walks the exception and its explicit causes, returning the first instance of error_type.
    """
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, error_type):
            return error
        seen.add(id(error))
        error = error.__cause__
    return None
