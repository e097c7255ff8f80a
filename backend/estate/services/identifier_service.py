# Overview: Record identifier generation.

"""
Identifier Service - record ids

FORMAT: "<prefix>-<7 base36 chars>", e.g. "C-k3j9x0a". The prefix names the
entity kind (C customer, U unit, S safe, V voucher, B broker, LOG audit entry).

UNIQUENESS: ids are random, not checked against the store. Callers that
need a guarantee must look the id up in the target collection.
"""

import secrets
import string

ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 7

PREFIX_CUSTOMER = "C"
PREFIX_UNIT = "U"
PREFIX_SAFE = "S"
PREFIX_VOUCHER = "V"
PREFIX_BROKER = "B"
PREFIX_LOG = "LOG"

# Prefix used when a record is created without an explicit id
COLLECTION_PREFIXES = {
    "customers": PREFIX_CUSTOMER,
    "units": PREFIX_UNIT,
    "partners": "P",
    "unitPartners": "UP",
    "contracts": "CT",
    "installments": "I",
    "partnerDebts": "PD",
    "safes": PREFIX_SAFE,
    "transfers": "T",
    "auditLog": PREFIX_LOG,
    "vouchers": PREFIX_VOUCHER,
    "brokerDues": "BD",
    "brokers": PREFIX_BROKER,
    "partnerGroups": "PG",
}


def uid(prefix: str) -> str:
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{suffix}"


def uid_for(collection: str) -> str:
    return uid(COLLECTION_PREFIXES.get(collection, "R"))
