from operator import itemgetter
from pathlib import Path
from typing import Any, Dict

import yaml

from fingerprint_pinning.digest import DigestAlgorithmEnum
from fingerprint_pinning.trust_evaluator import FingerprintTrustEvaluator
from fingerprint_pinning.upstream_trust import ChainTrustCheck


class HostNotPinnedError(KeyError):
    pass


class PinningConfiguration:
    """The pinned fingerprints of each host, as loaded from a YAML pins file.

    Each host gets its own FingerprintTrustEvaluator; all of them share the same upstream chain trust check.
    """

    def __init__(self, evaluators: Dict[str, FingerprintTrustEvaluator]) -> None:
        self._evaluators: Dict[str, FingerprintTrustEvaluator] = {}
        for host, evaluator in evaluators.items():
            normalized_host = host.strip().lower()
            # Host names are case-insensitive
            if normalized_host in self._evaluators:
                raise ValueError(f"Host {host} is configured more than once")
            self._evaluators[normalized_host] = evaluator

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PinningConfiguration):
            return False
        return {host: ev.pinned_fingerprints for host, ev in self._evaluators.items()} == {
            host: ev.pinned_fingerprints for host, ev in other._evaluators.items()
        }

    @property
    def hosts(self) -> Dict[str, FingerprintTrustEvaluator]:
        return dict(self._evaluators)

    def is_host_pinned(self, host: str) -> bool:
        return host.strip().lower() in self._evaluators

    def evaluator_for_host(self, host: str) -> FingerprintTrustEvaluator:
        try:
            return self._evaluators[host.strip().lower()]
        except KeyError:
            raise HostNotPinnedError(f"No pinned fingerprints configured for {host}")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any], chain_trust_checker: ChainTrustCheck) -> "PinningConfiguration":
        hosts_dict = config_dict.get("hosts") if isinstance(config_dict, dict) else None
        if not isinstance(hosts_dict, dict):
            raise ValueError('Pins configuration must contain a "hosts" mapping')

        evaluators = {}
        for host, host_entry in hosts_dict.items():
            if not isinstance(host_entry, dict) or "pinned_fingerprints" not in host_entry:
                raise ValueError(f'Entry for host {host} must be a mapping with a "pinned_fingerprints" list')

            pinned_fingerprints = host_entry["pinned_fingerprints"]
            if not isinstance(pinned_fingerprints, list):
                raise ValueError(f"Pinned fingerprints for host {host} must be a list")

            evaluators[str(host)] = FingerprintTrustEvaluator(
                [str(fingerprint) for fingerprint in pinned_fingerprints],
                chain_trust_checker,
                str(host_entry.get("digest_algorithm", DigestAlgorithmEnum.SHA256.value)),
            )

        return cls(evaluators)

    @classmethod
    def from_yaml(cls, yaml_file_path: Path, chain_trust_checker: ChainTrustCheck) -> "PinningConfiguration":
        with open(yaml_file_path, mode="r") as pins_file:
            config_dict = yaml.safe_load(pins_file)
        return cls.from_dict(config_dict, chain_trust_checker)


# YAML serialization helpers
def _represent_pinning_configuration(dumper: yaml.Dumper, config: PinningConfiguration) -> yaml.Node:
    # Always sort the hosts alphabetically so it is easy to diff the file
    sorted_hosts = sorted(config.hosts.items(), key=itemgetter(0))
    final_dict = {"hosts": dict(sorted_hosts)}
    return dumper.represent_dict(final_dict.items())


yaml.add_representer(PinningConfiguration, _represent_pinning_configuration)


def _represent_trust_evaluator(dumper: yaml.Dumper, evaluator: FingerprintTrustEvaluator) -> yaml.Node:
    final_dict = {
        "digest_algorithm": evaluator.digest_algorithm.value,
        "pinned_fingerprints": list(evaluator.pinned_fingerprints),
    }
    return dumper.represent_dict(final_dict.items())


yaml.add_representer(FingerprintTrustEvaluator, _represent_trust_evaluator)
