"""
Snapshot Codec

Turns a whole Ledger into a portable document and back. Three forms:

1. Plain JSON      - the ledger document itself (download, durable blob)
2. Encrypted JSON  - {"cipher", "salt", "iv"} envelope around the plain form
3. Share link      - the plain form percent-encoded into `?state=...`

ROUND-TRIP LAW: decode(encode(L)) == L for every valid ledger, including
the order of clients, products, invoices and the history cache.

Import auto-detects the encrypted form: a document with both `cipher`
and `salt` keys is an envelope, anything else is a plain ledger.
"""

import json
from typing import Any, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from pydantic import ValidationError

from invoicecraft.models.ledger import Ledger
from invoicecraft.services.crypto import (
    CryptoFailureReason,
    DecryptionError,
    EncryptedEnvelope,
    EnvelopeCipher,
)


class SnapshotDecodeError(Exception):
    """The document is not valid JSON or not a valid ledger."""
    pass


class PasswordRequiredError(SnapshotDecodeError):
    """The document is encrypted and no password was supplied."""
    pass


class SnapshotCodec:
    """Encodes and decodes ledger snapshots."""

    def __init__(
        self,
        cipher: Optional[EnvelopeCipher] = None,
        share_param: str = "state",
    ):
        self._cipher = cipher or EnvelopeCipher()
        self._share_param = share_param

    # ---------------- Plain ---------------- #

    def encode(self, ledger: Ledger, indent: Optional[int] = 2) -> str:
        return ledger.model_dump_json(by_alias=True, indent=indent)

    def decode(self, text: str) -> Ledger:
        """
        Parse a plain ledger document.

        Raises:
            SnapshotDecodeError: on malformed JSON or a schema violation
        """
        document = self._parse_json(text)
        return self.from_document(document)

    def from_document(self, document: Any) -> Ledger:
        if not isinstance(document, dict):
            raise SnapshotDecodeError("Ledger document must be a JSON object")
        try:
            return Ledger.model_validate(document)
        except ValidationError as e:
            raise SnapshotDecodeError(f"Ledger document is invalid: {e}") from e

    # ---------------- Encrypted ---------------- #

    @staticmethod
    def is_envelope(document: Any) -> bool:
        return isinstance(document, dict) and "cipher" in document and "salt" in document

    async def encrypt(self, ledger: Ledger, password: str) -> EncryptedEnvelope:
        """Raises EncryptionError if the crypto backend fails."""
        return await self._cipher.encrypt(self.encode(ledger, indent=None), password)

    async def decrypt(self, envelope: EncryptedEnvelope, password: str) -> Ledger:
        """
        Raises:
            DecryptionError: wrong password, tampered or malformed envelope
            SnapshotDecodeError: decrypted text is not a valid ledger
        """
        plaintext = await self._cipher.decrypt(envelope, password)
        return self.decode(plaintext)

    async def encode_encrypted(self, ledger: Ledger, password: str) -> str:
        envelope = await self.encrypt(ledger, password)
        return envelope.model_dump_json()

    async def decode_import(self, text: str, password: Optional[str] = None) -> tuple[Ledger, bool]:
        """
        Decode an import file of either form.

        Returns:
            (ledger, was_encrypted)

        Raises:
            PasswordRequiredError: encrypted document and no password
            DecryptionError / SnapshotDecodeError: see decrypt / decode
        """
        document = self._parse_json(text)
        if not self.is_envelope(document):
            return self.from_document(document), False

        if not password:
            raise PasswordRequiredError("Password required to decrypt this file")
        try:
            envelope = EncryptedEnvelope.model_validate(document)
        except ValidationError as e:
            raise DecryptionError(
                CryptoFailureReason.MALFORMED_ENVELOPE,
                f"Encrypted envelope is incomplete: {e}",
            ) from e
        return await self.decrypt(envelope, password), True

    # ---------------- Share link ---------------- #

    def share_link(self, ledger: Ledger, base_url: str) -> str:
        """`base_url` with the whole ledger embedded as the share parameter."""
        encoded = quote(self.encode(ledger, indent=None), safe="")
        parts = urlsplit(base_url)
        return urlunsplit((parts.scheme, parts.netloc, parts.path, f"{self._share_param}={encoded}", ""))

    def read_shared_state(self, url: str) -> Optional[Ledger]:
        """
        The ledger embedded in `url`, or None when the parameter is absent.

        Raises:
            SnapshotDecodeError: the parameter is present but malformed
        """
        for name, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
            if name == self._share_param:
                return self.decode(value)
        return None

    def strip_shared_state(self, url: str) -> str:
        """`url` without the share parameter (the address shown after import)."""
        parts = urlsplit(url)
        kept = [
            (name, value)
            for name, value in parse_qsl(parts.query, keep_blank_values=True)
            if name != self._share_param
        ]
        return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))

    # ---------------- Helpers ---------------- #

    @staticmethod
    def _parse_json(text: str) -> Any:
        try:
            return json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise SnapshotDecodeError(f"Not a JSON document: {e}") from e
