from enum import Enum
from typing import Tuple, Union

from cryptography.hazmat.primitives import hashes


class DigestAlgorithmEnum(Enum):
    """The hash algorithms that can be used to compute a certificate's fingerprint.
    """

    SHA1 = "SHA1"
    SHA256 = "SHA256"

    @classmethod
    def from_name(cls, name: Union[str, "DigestAlgorithmEnum"]) -> "DigestAlgorithmEnum":
        """Resolve an algorithm selector such as "SHA256" or "sha-1".

        Unknown names are rejected instead of falling back to SHA-256.
        """
        if isinstance(name, DigestAlgorithmEnum):
            return name

        normalized_name = name.strip().upper().replace("-", "")
        try:
            return cls(normalized_name)
        except ValueError:
            raise ValueError(f'Unsupported digest algorithm "{name}"; expected one of SHA1, SHA256')

    @property
    def digest_size(self) -> int:
        return self.hash_algorithm.digest_size

    @property
    def hex_length(self) -> int:
        return self.digest_size * 2

    @property
    def hash_algorithm(self) -> Union[hashes.SHA1, hashes.SHA256]:
        if self == DigestAlgorithmEnum.SHA1:
            return hashes.SHA1()
        return hashes.SHA256()


def compute_fingerprint(certificate_bytes: bytes, algorithm: DigestAlgorithmEnum) -> Tuple[bytes, str]:
    """Hash the raw (DER) bytes of a certificate.

    Returns the binary digest and its lowercase hex encoding, without separators.
    """
    digest_ctx = hashes.Hash(algorithm.hash_algorithm)
    digest_ctx.update(certificate_bytes)
    digest = digest_ctx.finalize()
    return digest, digest.hex()
