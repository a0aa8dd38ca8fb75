"""
Encrypt an API key for the ai.credentials section of config.yaml.

Usage (from backend directory):
  python -m scripts.encrypt_key GROQ_API_KEY

The key is read from stdin without echo. Paste the printed line into
config.yaml; the server decrypts it with AI_EDITOR_ENCRYPTION_KEY.
"""

import getpass
import sys

from ai_editor.core.security import ENCRYPTED_PREFIX, encrypt_api_key


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python -m scripts.encrypt_key <CREDENTIAL_REF>", file=sys.stderr)
        return 2
    ref = argv[0]
    api_key = getpass.getpass(f"{ref}: ").strip()
    if not api_key:
        print("No key entered", file=sys.stderr)
        return 1
    print(f"{ref}: {ENCRYPTED_PREFIX}{encrypt_api_key(api_key)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
