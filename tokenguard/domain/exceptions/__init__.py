"""Domain exceptions - business rule violations and token failures."""

from tokenguard.domain.exceptions.domain_exceptions import (
    AccountStoreUnavailableException,
    DomainException,
    InvalidEntityStateException,
    InvalidSignatureException,
    MalformedTokenException,
    StoreUnavailableException,
    TokenExpiredException,
    TokenRevokedException,
    TokenValidationException,
    WrongTokenTypeException,
)

__all__ = [
    "DomainException",
    "InvalidEntityStateException",
    "StoreUnavailableException",
    "AccountStoreUnavailableException",
    "TokenValidationException",
    "MalformedTokenException",
    "InvalidSignatureException",
    "TokenExpiredException",
    "WrongTokenTypeException",
    "TokenRevokedException",
]
