"""
Inspect and repair per-job claims by hand.

Meant for the cases the automatic flow leaves behind, e.g. a claim orphaned
because its delete failed while the job was removed.

Usage:
    PYTHONPATH=. python scripts/job_pvc_admin.py normalize "MY projects/cli"
    PYTHONPATH=. python scripts/job_pvc_admin.py list --namespace ci [--managed-only]
    PYTHONPATH=. python scripts/job_pvc_admin.py ensure "team/job" --namespace ci \
        --size 20Gi --access-mode ReadWriteOnce --storage-class standard
    PYTHONPATH=. python scripts/job_pvc_admin.py remove "team/job" --namespace ci
"""

import argparse
import sys

from pydantic import ValidationError

from jobpvc.configs.app_configs import PVC_DEFAULT_LABELS
from jobpvc.configs.app_configs import PVC_NAMESPACE
from jobpvc.configs.constants import ACCESS_MODE_OPTIONS
from jobpvc.configs.constants import PVC_NAME_PREFIX
from jobpvc.volumes.exceptions import VolumeClaimError
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.models import PVCSpec
from jobpvc.volumes.naming import is_valid_claim_name
from jobpvc.volumes.naming import normalize
from jobpvc.volumes.reconciler import PVCReconciler
from jobpvc.volumes.store.base import ClusterVolumeStore
from jobpvc.volumes.store.base import get_volume_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage per-job PVCs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize_parser = subparsers.add_parser(
        "normalize", help="Print the PVC name derived from a job identity"
    )
    normalize_parser.add_argument("identity", type=str)

    list_parser = subparsers.add_parser("list", help="List per-job PVCs")
    list_parser.add_argument("--namespace", type=str, default=PVC_NAMESPACE)
    list_parser.add_argument(
        "--managed-only",
        action="store_true",
        help="Only show PVCs carrying the configured labels",
    )

    ensure_parser = subparsers.add_parser(
        "ensure", help="Create or resize the PVC of a job"
    )
    ensure_parser.add_argument("identity", type=str)
    ensure_parser.add_argument("--namespace", type=str, default=PVC_NAMESPACE)
    ensure_parser.add_argument("--size", type=str, default=None)
    ensure_parser.add_argument(
        "--access-mode",
        action="append",
        choices=[mode.value for mode in ACCESS_MODE_OPTIONS],
        default=None,
    )
    ensure_parser.add_argument("--storage-class", type=str, default=None)

    remove_parser = subparsers.add_parser("remove", help="Delete the PVC of a job")
    remove_parser.add_argument("identity", type=str)
    remove_parser.add_argument("--namespace", type=str, default=PVC_NAMESPACE)

    return parser


def _format_claim(claim: ClaimRecord) -> str:
    return (
        f"{claim.key}  size={claim.requested_storage}  "
        f"modes={','.join(claim.access_modes)}  "
        f"class={claim.storage_class_name or '-'}  phase={claim.phase or '-'}"
    )


def _is_managed(claim: ClaimRecord) -> bool:
    return all(
        claim.labels.get(key) == value for key, value in PVC_DEFAULT_LABELS.items()
    )


def run(args: argparse.Namespace, store: ClusterVolumeStore | None = None) -> int:
    if args.command == "normalize":
        name = normalize(args.identity)
        print(name)
        if not is_valid_claim_name(name):
            print(f"WARNING: {name!r} is not a valid PVC name", file=sys.stderr)
            return 1
        return 0

    try:
        reconciler = PVCReconciler(store or get_volume_store())
        if args.command == "list":
            claims = [
                claim
                for claim in reconciler.store.list_claims(args.namespace)
                if claim.name.startswith(PVC_NAME_PREFIX)
                and (not args.managed_only or _is_managed(claim))
            ]
            for claim in sorted(claims, key=lambda c: c.name):
                print(_format_claim(claim))
            print(f"{len(claims)} PVC(s)")
        elif args.command == "ensure":
            spec = PVCSpec(
                requested_size=args.size,
                access_modes=args.access_mode,
                storage_class_name=args.storage_class,
            )
            claim = reconciler.ensure_for_identity(args.identity, args.namespace, spec)
            print(_format_claim(claim))
        elif args.command == "remove":
            removed = reconciler.remove_for_identity(args.identity, args.namespace)
            name = normalize(args.identity)
            if removed:
                print(f"Removed PVC {args.namespace}/{name}")
            else:
                print(f"No PVC {args.namespace}/{name} found")
    except (VolumeClaimError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
