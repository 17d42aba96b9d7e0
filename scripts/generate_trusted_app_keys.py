#!/usr/bin/env python3
"""
Trusted Apps Key Generation Script

Generates an RSA keypair for a service and writes a trusted_apps.yaml
skeleton with the keys encoded as base64 DER. Share the public key with
every service that should accept calls from this one.

Usage:
    python3 scripts/generate_trusted_app_keys.py --provider-id my-service
    python3 scripts/generate_trusted_app_keys.py --provider-id my-service --output config/trusted_apps.yaml
"""
import sys
import os
import argparse
from pathlib import Path

import yaml

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from trustedapps.core.signing.keys import (  # noqa: E402
    DEFAULT_KEY_SIZE,
    encode_private_key,
    encode_public_key,
    generate_keypair,
)


def build_config(provider_id: str, key_size: int = DEFAULT_KEY_SIZE) -> dict:
    """Generate a keypair and return the trusted apps config mapping."""
    private_key, public_key = generate_keypair(key_size)
    return {
        "shire": {"providerId": provider_id},
        "trustedApps": {
            "publicKey": encode_public_key(public_key),
            "privateKey": encode_private_key(private_key),
            "apps": {},
        },
        "allowMultipleProtocolsInURL": False,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate an RSA keypair and trusted apps config for a service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print config to stdout
    python3 scripts/generate_trusted_app_keys.py --provider-id billing

    # Write config file (refuses to overwrite without --force)
    python3 scripts/generate_trusted_app_keys.py --provider-id billing --output config/trusted_apps.yaml
        """
    )
    parser.add_argument("--provider-id", required=True, help="Provider id of this service")
    parser.add_argument("--key-size", type=int, default=DEFAULT_KEY_SIZE, help="RSA key size in bits")
    parser.add_argument("--output", help="Write YAML config to this file instead of stdout")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    args = parser.parse_args(argv)

    config = build_config(args.provider_id, args.key_size)
    text = yaml.safe_dump(config, sort_keys=False, width=float("inf"))

    if not args.output:
        print(text, end="")
        return 0

    output = Path(args.output)
    if output.exists() and not args.force:
        print(f"❌ {output} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)
    os.chmod(output, 0o600)  # contains the private key
    print(f"✅ Wrote trusted apps config for '{args.provider_id}' to {output}")
    print(f"Public key to share:\n{config['trustedApps']['publicKey']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
