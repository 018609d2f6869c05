import datetime
from typing import Tuple

import pytest

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID


VALIDATION_TIME = datetime.datetime(2030, 6, 1, tzinfo=datetime.timezone.utc)


def _build_certificate(
    subject_name: str,
    public_key: ec.EllipticCurvePublicKey,
    issuer_name: str,
    issuer_key: ec.EllipticCurvePrivateKey,
    is_ca: bool,
    dns_name: str = "",
) -> x509.Certificate:
    builder = (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_name)]))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer_name)]))
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(VALIDATION_TIME - datetime.timedelta(days=30))
        .not_valid_after(VALIDATION_TIME + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()), critical=False
        )
    )
    if is_ca:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    else:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(dns_name)]), critical=False
        ).add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)

    return builder.sign(issuer_key, hashes.SHA256())


def build_chain(host: str, root_name: str = "Test Root CA") -> Tuple[x509.Certificate, x509.Certificate]:
    """Return a (leaf, root) pair where the leaf is valid for host and signed by the root.
    """
    root_key = ec.generate_private_key(ec.SECP256R1())
    root_cert = _build_certificate(root_name, root_key.public_key(), root_name, root_key, is_ca=True)

    leaf_key = ec.generate_private_key(ec.SECP256R1())
    leaf_cert = _build_certificate(host, leaf_key.public_key(), root_name, root_key, is_ca=False, dns_name=host)
    return leaf_cert, root_cert


@pytest.fixture(scope="session")
def example_chain() -> Tuple[x509.Certificate, x509.Certificate]:
    return build_chain("www.example.com")


@pytest.fixture(scope="session")
def example_chain_der(example_chain):
    leaf_cert, root_cert = example_chain
    return [leaf_cert.public_bytes(Encoding.DER), root_cert.public_bytes(Encoding.DER)]


@pytest.fixture(scope="session")
def unrelated_chain_der():
    leaf_cert, root_cert = build_chain("www.unrelated.com", root_name="Unrelated Root CA")
    return [leaf_cert.public_bytes(Encoding.DER), root_cert.public_bytes(Encoding.DER)]


@pytest.fixture(scope="session")
def validation_time() -> datetime.datetime:
    return VALIDATION_TIME
