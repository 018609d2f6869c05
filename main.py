from pathlib import Path
from typing import List, Optional
import argparse
import sys

import yaml

from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509 import load_pem_x509_certificate

from fingerprint_pinning import __version__
from fingerprint_pinning.digest import DigestAlgorithmEnum, compute_fingerprint
from fingerprint_pinning.pinning_config import PinningConfiguration
from fingerprint_pinning.upstream_trust import X509ChainTrustChecker


def load_certificate_as_der(cert_path: Path) -> bytes:
    if cert_path.name.endswith(".pem"):
        cert_as_pem = cert_path.read_text()
        parsed_cert = load_pem_x509_certificate(cert_as_pem.encode(encoding="ascii"))
        return parsed_cert.public_bytes(Encoding.DER)
    elif cert_path.name.endswith(".der"):
        return cert_path.read_bytes()
    else:
        raise ValueError(f"Unsupported certificate file {cert_path}; expected a .pem or .der file")


def print_fingerprints(folder_with_certs: Path, digest_algorithm: DigestAlgorithmEnum) -> None:
    """Print the fingerprint of each PEM or DER certificate in the supplied folder, as a YAML pins list.
    """
    pinned_fingerprints = []
    for cert_path in sorted(folder_with_certs.glob("*")):
        try:
            cert_as_der = load_certificate_as_der(cert_path)
        except ValueError:
            print(f"# Skipping file {cert_path}.")
            continue

        _, hex_fingerprint = compute_fingerprint(cert_as_der, digest_algorithm)
        pinned_fingerprints.append(hex_fingerprint)

    pins_dict = {"digest_algorithm": digest_algorithm.value, "pinned_fingerprints": pinned_fingerprints}
    print(yaml.dump(pins_dict, default_flow_style=False, sort_keys=False), end="")


def evaluate_chain(host: str, pins_path: Path, roots_path: Path, chain_paths: List[Path]) -> bool:
    """Evaluate a certificate chain (leaf first) against the fingerprints pinned for the host.
    """
    chain_trust_checker = X509ChainTrustChecker.from_pem_file(roots_path)
    pinning_config = PinningConfiguration.from_yaml(pins_path, chain_trust_checker)
    evaluator = pinning_config.evaluator_for_host(host)

    chain = [load_certificate_as_der(cert_path) for cert_path in chain_paths]
    outcome = evaluator.evaluate(host, chain)
    if outcome.rejection_reason is None:
        print("ACCEPTED")
        return True

    print(f"REJECTED: {outcome.rejection_reason.name}")
    for index, hex_fingerprint in enumerate(evaluator.compute_chain_fingerprints(chain)):
        print(f"  #{index} {evaluator.digest_algorithm.value} {hex_fingerprint}")
    return False


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Certificate fingerprint pinning CLI.")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--fingerprint", action="store", help=str(print_fingerprints.__doc__))
    parser.add_argument(
        "--algorithm",
        action="store",
        choices=[algorithm.value for algorithm in DigestAlgorithmEnum],
        help="Digest algorithm used with --fingerprint (default: SHA256).",
    )
    parser.add_argument("--evaluate", action="store", metavar="HOST", help=str(evaluate_chain.__doc__))
    parser.add_argument("--pins", action="store", help="YAML file with the pinned fingerprints of each host.")
    parser.add_argument("--roots", action="store", help="PEM bundle of the trusted root certificates.")
    parser.add_argument("--chain", action="store", nargs="+", help="PEM or DER certificate files, leaf first.")
    args = parser.parse_args(argv)

    if args.fingerprint and args.evaluate:
        parser.error("Cannot combine --fingerprint with --evaluate.")

    if args.fingerprint:
        algorithm = DigestAlgorithmEnum.from_name(args.algorithm or DigestAlgorithmEnum.SHA256.value)
        print_fingerprints(Path(args.fingerprint), algorithm)

    if args.evaluate:
        # The algorithm of each host comes from the pins file
        if args.algorithm:
            parser.error("--algorithm cannot be combined with --evaluate")
        if not (args.pins and args.roots and args.chain):
            parser.error("--evaluate requires --pins, --roots and --chain")
        is_trusted = evaluate_chain(
            args.evaluate, Path(args.pins), Path(args.roots), [Path(cert_path) for cert_path in args.chain]
        )
        return 0 if is_trusted else 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
