"""
Signer abstraction for EIP-712 transactions.

Every supported wallet shape is normalized into an ``AultSigner`` whose
``sign_typed_data(typed_data)`` returns a signature in any of the accepted
forms; ``normalize_signature`` turns that into one canonical hex string.

Callers should prefer the tagged form, e.g.::

    {"type": "private_key", "key": "0x..."}
    {"type": "eip1193", "provider": provider, "address": "0x..."}

``detect_signer`` falls back to structural detection for untagged input.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Union

from eth_account.signers.local import LocalAccount
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError
from eth_utils import to_bytes as hex_to_bytes
from web3 import Web3

from ..address import bytes_to_bech32, evm_to_ault, is_valid_ault_address, is_valid_evm_address
from ..exceptions import ConfigurationError, SignerDetectionError, ValidationError
from .hashing import hash_typed_data

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65
SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"

SignatureResult = Union[str, bytes, Mapping[str, Any], Any]
SignTypedDataFn = Callable[[Dict[str, Any]], SignatureResult]


class AultSigner(ABC):
    """
    Anything that can sign Ault EIP-712 typed data.

    Subclasses may set ``address`` or override ``get_address``.
    """

    address: Optional[str] = None

    @abstractmethod
    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        """Sign the full typed-data dict and return a signature."""

    def get_address(self) -> Optional[str]:
        return self.address


class CallableSigner(AultSigner):
    """Wraps a bare ``fn(typed_data) -> signature`` function."""

    def __init__(self, fn: SignTypedDataFn, address: Optional[str] = None):
        self._fn = fn
        self.address = address

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        return self._fn(typed_data)


class PrivySigner(CallableSigner):
    """Embedded-wallet callback that takes the signer address as an option."""

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        if self.address:
            return self._fn(typed_data, {"address": self.address})
        return self._fn(typed_data)


class PrivateKeySigner(AultSigner):
    """
    Signs locally with a secp256k1 private key.

    The digest comes from ``hash_typed_data``, which accepts the string-typed
    ``verifyingContract`` and ``salt`` of the Cosmos EVM domain.
    """

    def __init__(self, private_key: Union[str, bytes]):
        try:
            if isinstance(private_key, str):
                key_bytes = hex_to_bytes(hexstr=private_key)
            else:
                key_bytes = bytes(private_key)
            self._key = keys.PrivateKey(key_bytes)
        except (ValueError, TypeError, KeyValidationError) as e:
            raise ValidationError(f"Invalid private key: {e}") from e
        self.address = self._key.public_key.to_checksum_address()

    @classmethod
    def from_account(cls, account: LocalAccount) -> "PrivateKeySigner":
        return cls(bytes(account.key))

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        signature = self._key.sign_msg_hash(hash_typed_data(typed_data))
        r, s, v = signature.r, signature.s, signature.v
        return "0x" + r.to_bytes(32, "big").hex() + s.to_bytes(32, "big").hex() + format(v + 27, "02x")


class WalletSigner(AultSigner):
    """
    Wallet client exposing ``address`` / ``get_addresses`` and either a
    JSON-RPC ``request(method, params)`` or ``sign_typed_data(**typed_data)``.
    """

    def __init__(self, wallet: Any, prefer_rpc: bool = True):
        self.wallet = wallet
        self.prefer_rpc = prefer_rpc

    def get_address(self) -> Optional[str]:
        address = getattr(self.wallet, "address", None)
        if isinstance(address, str) and address:
            return address
        get_addresses = getattr(self.wallet, "get_addresses", None)
        if callable(get_addresses):
            addresses = get_addresses()
            if addresses:
                return addresses[0]
        return None

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        request = getattr(self.wallet, "request", None)
        if self.prefer_rpc and callable(request):
            address = self.get_address()
            if not address:
                raise ConfigurationError("Wallet has no address; pass signer_address explicitly.")
            signature = request(SIGN_TYPED_DATA_V4, [address, json.dumps(typed_data)])
            if not isinstance(signature, str):
                raise ValidationError("RPC signer did not return a signature string.")
            return signature

        sign = getattr(self.wallet, "sign_typed_data", None)
        if not callable(sign):
            raise ConfigurationError("Wallet does not support sign_typed_data.")
        return sign(
            domain=typed_data["domain"],
            types=typed_data["types"],
            primary_type=typed_data["primaryType"],
            message=typed_data["message"],
        )


def strip_eip712_domain(types: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: fields for name, fields in types.items() if name != "EIP712Domain"}


class AdapterSigner(AultSigner):
    """
    Third-party signer whose signing call is ``sign(domain, types, message)``
    and which expects ``EIP712Domain`` to be absent from ``types``.
    """

    def __init__(self, signer: Any):
        sign = getattr(signer, "sign_typed_data", None) or getattr(signer, "_sign_typed_data", None)
        if not callable(sign):
            raise ConfigurationError("Adapter signer must implement sign_typed_data or _sign_typed_data.")
        self.signer = signer
        self._sign = sign

    def get_address(self) -> Optional[str]:
        return self.signer.get_address()

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        types = strip_eip712_domain(typed_data["types"])
        return self._sign(typed_data["domain"], types, typed_data["message"])


class Eip1193Signer(AultSigner):
    """
    JSON-RPC provider with an explicit account address.

    Accepts objects with ``request(method, params)``, web3 providers with
    ``make_request(method, params)``, or a ``Web3`` instance.
    """

    def __init__(self, provider: Any, address: str, method: str = SIGN_TYPED_DATA_V4):
        if not address:
            raise ConfigurationError("An EIP-1193 signer requires an explicit address.")
        self.provider = provider
        self.address = address
        self.method = method

    @classmethod
    def from_rpc_url(cls, rpc_url: str, address: str, method: str = SIGN_TYPED_DATA_V4) -> "Eip1193Signer":
        """Sign through a JSON-RPC node that manages ``address`` (e.g. an unlocked dev account)."""
        return cls(Web3.HTTPProvider(rpc_url), address, method)

    def _call(self, params: list) -> Any:
        request = getattr(self.provider, "request", None)
        if callable(request):
            return request(self.method, params)

        provider = self.provider
        if not callable(getattr(provider, "make_request", None)):
            provider = getattr(provider, "provider", None)
        if provider is None or not callable(getattr(provider, "make_request", None)):
            raise ConfigurationError("Provider must implement request() or make_request().")
        response = provider.make_request(self.method, params)
        if response.get("error"):
            raise ValidationError(f"Provider rejected {self.method}: {response['error']}")
        return response.get("result")

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        payload = json.dumps(typed_data) if self.method == SIGN_TYPED_DATA_V4 else typed_data
        signature = self._call([self.address, payload])
        if isinstance(signature, (bytes, bytearray)):
            signature = "0x" + bytes(signature).hex()
        if not isinstance(signature, str):
            raise ValidationError("Provider did not return a signature string.")
        return signature


class ObjectSigner(AultSigner):
    """Generic object exposing ``sign_typed_data(typed_data)``."""

    def __init__(self, obj: Any):
        self.obj = obj

    def get_address(self) -> Optional[str]:
        address = getattr(self.obj, "address", None)
        if isinstance(address, str):
            return address
        getter = getattr(self.obj, "get_address", None)
        return getter() if callable(getter) else None

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> SignatureResult:
        return self.obj.sign_typed_data(typed_data)


def _from_tagged(spec: Mapping[str, Any]) -> AultSigner:
    kind = spec["type"]
    if kind in ("wallet", "viem"):
        return WalletSigner(spec["wallet"], prefer_rpc=spec.get("prefer_rpc", True))
    if kind in ("adapter", "ethers"):
        return AdapterSigner(spec["signer"])
    if kind == "callback":
        return CallableSigner(spec["sign_typed_data"], address=spec.get("address"))
    if kind == "privy":
        return PrivySigner(spec["sign_typed_data"], address=spec.get("address"))
    if kind in ("private_key", "privateKey"):
        return PrivateKeySigner(spec["key"])
    if kind in ("eip1193", "rpc"):
        method = spec.get("method", SIGN_TYPED_DATA_V4)
        if "url" in spec:
            return Eip1193Signer.from_rpc_url(spec["url"], spec.get("address"), method)
        return Eip1193Signer(spec["provider"], spec.get("address"), method)
    raise SignerDetectionError(f"Unknown signer type: {kind}")


def _is_adapter(obj: Any) -> bool:
    if not callable(getattr(obj, "get_address", None)):
        return False
    has_sign = callable(getattr(obj, "sign_typed_data", None)) or callable(getattr(obj, "_sign_typed_data", None))
    return has_sign and (getattr(obj, "provider", None) is not None or hasattr(obj, "_sign_typed_data"))


def detect_signer(signer: Any) -> AultSigner:
    """
    Normalize any supported signer input into an ``AultSigner``.

    Detection runs in this order: SDK signers, tagged dicts, eth_account
    local accounts, bare callables, adapter objects, RPC wallets, then any
    object with ``sign_typed_data``.

    Raises:
        ConfigurationError: If an object has ``request`` but no address source
        SignerDetectionError: If no shape matches
    """
    if isinstance(signer, AultSigner):
        return signer
    if isinstance(signer, Mapping) and "type" in signer:
        return _from_tagged(signer)
    if isinstance(signer, LocalAccount):
        return PrivateKeySigner.from_account(signer)
    if callable(signer):
        return CallableSigner(signer)
    if _is_adapter(signer):
        return AdapterSigner(signer)
    if callable(getattr(signer, "request", None)):
        has_address = isinstance(getattr(signer, "address", None), str)
        if has_address or callable(getattr(signer, "get_addresses", None)):
            return WalletSigner(signer)
        raise ConfigurationError(
            'Object has a "request" method but no "address" or "get_addresses". '
            'Use {"type": "eip1193", "provider": ..., "address": ...} to pass the signer address.'
        )
    if callable(getattr(signer, "sign_typed_data", None)):
        return ObjectSigner(signer)
    raise SignerDetectionError(
        "Could not auto-detect signer type. Use an explicit "
        '{"type": "wallet" | "adapter" | "privy" | "private_key" | "eip1193", ...} dict.'
    )


def normalize_signature(result: SignatureResult) -> str:
    """
    Return a signature as ``0x`` followed by 130 lowercase hex characters.

    Accepts a hex string, raw bytes, a ``{"signature": ...}`` mapping or any
    object with a ``signature`` attribute (e.g. eth_account's ``SignedMessage``).

    Raises:
        ValidationError: If the value is not a 65-byte signature
    """
    if isinstance(result, Mapping):
        if "signature" not in result:
            raise ValidationError("Invalid signature response: expected hex string or {signature}.")
        return normalize_signature(result["signature"])
    if isinstance(result, (bytes, bytearray)):
        raw = bytes(result)
    elif isinstance(result, str):
        text = result[2:] if result[:2].lower() == "0x" else result
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValidationError("Invalid signature: not a hex string.") from e
    elif hasattr(result, "signature"):
        return normalize_signature(result.signature)
    else:
        raise ValidationError("Invalid signature response: expected hex string or {signature}.")

    if len(raw) != SIGNATURE_LENGTH:
        raise ValidationError(f"Invalid signature length: expected {SIGNATURE_LENGTH} bytes, got {len(raw)}.")
    return "0x" + raw.hex()


def resolve_signer_address(signer: Optional[AultSigner], signer_address: Optional[str] = None) -> str:
    """
    Resolve the ``ault1...`` address that signs the transaction.

    Raises:
        ValidationError: If no address is available or it is in an unknown format
    """
    raw = signer_address
    if raw is None and signer is not None:
        raw = signer.get_address()
    if not raw:
        raise ValidationError("signer_address is required when the signer has no address.")
    if is_valid_ault_address(raw):
        return raw
    if is_valid_evm_address(raw):
        return evm_to_ault(raw)
    raise ValidationError(f"Invalid signer_address: {raw}")


def recover_public_key(typed_data: Mapping[str, Any], signature: str) -> keys.PublicKey:
    raw = bytes.fromhex(normalize_signature(signature)[2:])
    v = raw[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise ValidationError(f"Invalid signature recovery id: {raw[64]}")
    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    digest = hash_typed_data(typed_data)
    try:
        return keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, KeyValidationError) as e:
        raise ValidationError(f"Could not recover public key from signature: {e}") from e


def recover_compressed_pubkey(typed_data: Mapping[str, Any], signature: str) -> bytes:
    """Recover the signer's 33-byte compressed secp256k1 public key."""
    return recover_public_key(typed_data, signature).to_compressed_bytes()


def recover_signer_address(typed_data: Mapping[str, Any], signature: str) -> str:
    """Recover the ``ault1...`` address that produced ``signature``."""
    return bytes_to_bech32(recover_public_key(typed_data, signature).to_canonical_address())
