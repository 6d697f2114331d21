"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Merkle inclusion proofs.

A MerkleProof is an immutable snapshot issued by MerkleTree.generate_proof:
the leaf data, its index, the ordered sibling path and the root the path
was computed against. Updating the source tree afterwards never changes an
issued proof; the proof keeps verifying against its recorded root.

Transport encodings:
- API format: [(sibling_hash_hex, direction_code), ...] with 0=LEFT, 1=RIGHT
- Library format (legacy): [{"sibling_hash": bytes, "side": 0|1}, ...]
- Position format (legacy): [{"sibling": hex, "position": "left"|"right"}, ...]
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from tallytree.exceptions import MalformedEncodingError


LeafData = Union[str, bytes]


def snapshot_leaf(data: Any) -> Any:
    """Copy mutable byte buffers (bytearray, memoryview) into immutable bytes."""
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    return data


class ProofDirection(IntEnum):
    """
    Side of the current hash the sibling sits on.
    
    LEFT: parent = H(sibling || current)
    RIGHT: parent = H(current || sibling)
    """
    
    LEFT = 0
    RIGHT = 1


@dataclass(frozen=True)
class ProofElement:
    """
    Single step of an inclusion proof.
    
    Attributes:
        sibling_hash: Digest of the sibling node at this level
        direction: Side the sibling sits on when concatenating
    """
    sibling_hash: bytes
    direction: ProofDirection


def decode_hex(value: str, what: str = "hex value") -> bytes:
    """
    Decode a hex string, raising MalformedEncodingError on failure.
    
    Args:
        value: Hex encoded string (case-insensitive, optional 0x prefix)
        what: Description used in the error message
    
    Returns:
        Decoded bytes
    """
    if not isinstance(value, str):
        raise MalformedEncodingError(f"Invalid {what}: expected str, got {type(value).__name__}")
    text = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise MalformedEncodingError(f"Invalid {what} {value!r}: {e}") from e


def _parse_direction(code: Any) -> ProofDirection:
    # bool is an int subclass but never a valid direction code
    if isinstance(code, bool):
        raise MalformedEncodingError(f"Invalid proof direction code: {code!r}")
    try:
        return ProofDirection(code)
    except ValueError:
        raise MalformedEncodingError(f"Invalid proof direction code: {code!r}") from None


def _require_field(item: Any, key: str) -> Any:
    if not isinstance(item, Mapping):
        raise MalformedEncodingError(f"Proof entry must be a mapping, got {item!r}")
    if key not in item:
        raise MalformedEncodingError(f"Proof entry {dict(item)!r} is missing {key!r}")
    return item[key]


@dataclass(frozen=True)
class MerkleProof:
    """
    Proof that a leaf is included in a Merkle tree.
    
    Attributes:
        leaf_data: Original leaf data (str or bytes)
        leaf_index: 0-based index of the leaf at issue time
        elements: Sibling path ordered from leaf level to root
        root_hash: Root the proof was issued against
    """
    leaf_data: LeafData
    leaf_index: int
    elements: Tuple[ProofElement, ...] = field(default_factory=tuple)
    root_hash: bytes = b""
    
    def __post_init__(self):
        # Freeze caller-supplied buffers and lists so the snapshot cannot be altered
        object.__setattr__(self, "leaf_data", snapshot_leaf(self.leaf_data))
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))
    
    def __len__(self) -> int:
        return len(self.elements)
    
    @property
    def root_hex(self) -> str:
        """Recorded root as lowercase hex."""
        return self.root_hash.hex()
    
    @property
    def directions(self) -> List[ProofDirection]:
        """Directions of the proof elements in order."""
        return [element.direction for element in self.elements]
    
    @staticmethod
    def to_api_format(elements: Iterable[ProofElement]) -> List[Tuple[str, int]]:
        """
        Convert proof elements to the flat transport representation.
        
        Args:
            elements: Proof elements
        
        Returns:
            List of (sibling_hash_hex, direction_code) pairs
        """
        return [(element.sibling_hash.hex(), int(element.direction)) for element in elements]
    
    @staticmethod
    def from_api_format(pairs: Iterable[Any]) -> Tuple[ProofElement, ...]:
        """
        Convert the flat transport representation back to proof elements.
        
        Args:
            pairs: Iterable of (sibling_hash_hex, direction_code) pairs
        
        Returns:
            Tuple of ProofElement
        
        Raises:
            MalformedEncodingError: On bad hex, bad direction code or bad shape
        """
        elements = []
        for pair in pairs:
            try:
                hash_hex, code = pair
            except (TypeError, ValueError):
                raise MalformedEncodingError(
                    f"Proof entry must be a (hash_hex, direction) pair, got {pair!r}"
                ) from None
            elements.append(
                ProofElement(
                    sibling_hash=decode_hex(hash_hex, "sibling hash"),
                    direction=_parse_direction(code),
                )
            )
        return tuple(elements)
    
    @staticmethod
    def from_library_format(items: Iterable[Mapping[str, Any]]) -> Tuple[ProofElement, ...]:
        """
        Adapt the legacy two-state side encoding to proof elements.
        
        Args:
            items: Records of {"sibling_hash": bytes, "side": 0|1}
        
        Returns:
            Tuple of ProofElement
        
        Raises:
            MalformedEncodingError: On a missing field, a sibling hash that
                is not bytes-like or an unknown side code
        """
        elements = []
        for item in items:
            sibling_hash = _require_field(item, "sibling_hash")
            if not isinstance(sibling_hash, (bytes, bytearray, memoryview)):
                raise MalformedEncodingError(
                    f"Invalid sibling hash: expected bytes, got {type(sibling_hash).__name__}"
                )
            elements.append(
                ProofElement(
                    sibling_hash=bytes(sibling_hash),
                    direction=_parse_direction(_require_field(item, "side")),
                )
            )
        return tuple(elements)
    
    @staticmethod
    def from_position_format(items: Iterable[Mapping[str, str]]) -> Tuple[ProofElement, ...]:
        """
        Adapt legacy string-keyed proofs to proof elements.
        
        Args:
            items: Records of {"sibling": hex, "position": "left"|"right"}
        
        Returns:
            Tuple of ProofElement
        
        Raises:
            MalformedEncodingError: On a missing field, bad hex or unknown position
        """
        elements = []
        for item in items:
            raw_position = _require_field(item, "position")
            position = raw_position.lower() if isinstance(raw_position, str) else ""
            if position == "left":
                direction = ProofDirection.LEFT
            elif position == "right":
                direction = ProofDirection.RIGHT
            else:
                raise MalformedEncodingError(f"Invalid proof position: {raw_position!r}")
            elements.append(
                ProofElement(
                    sibling_hash=decode_hex(_require_field(item, "sibling"), "sibling hash"),
                    direction=direction,
                )
            )
        return tuple(elements)
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a JSON-ready transport document.
        
        Bytes leaf data is hex encoded and flagged with leaf_encoding="hex".
        """
        if isinstance(self.leaf_data, str):
            leaf_data, encoding = self.leaf_data, "utf-8"
        else:
            leaf_data, encoding = bytes(self.leaf_data).hex(), "hex"
        return {
            "leaf_data": leaf_data,
            "leaf_encoding": encoding,
            "leaf_index": self.leaf_index,
            "proof": [list(pair) for pair in self.to_api_format(self.elements)],
            "root": self.root_hex,
        }
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MerkleProof":
        """
        Deserialize a transport document produced by to_dict.
        
        Raises:
            MalformedEncodingError: If the document is incomplete or undecodable
        """
        try:
            leaf_data = data["leaf_data"]
            proof = data["proof"]
            root = data["root"]
        except (KeyError, TypeError) as e:
            raise MalformedEncodingError(f"Proof document missing field: {e}") from e
        
        encoding = data.get("leaf_encoding", "utf-8")
        if encoding == "hex":
            leaf_data = decode_hex(leaf_data, "leaf data")
        elif encoding != "utf-8":
            raise MalformedEncodingError(f"Unknown leaf encoding: {encoding!r}")
        
        leaf_index = data.get("leaf_index", 0)
        if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
            raise MalformedEncodingError(f"Invalid leaf index: {leaf_index!r}")
        
        return cls(
            leaf_data=leaf_data,
            leaf_index=leaf_index,
            elements=cls.from_api_format(proof),
            root_hash=decode_hex(root, "root hash"),
        )
