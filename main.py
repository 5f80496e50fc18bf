"""
Process entrypoint.

    python main.py --dir ./docs --address 127.0.0.1:3030

MDSERVE_BASE_DIR / MDSERVE_ADDRESS are used when the flags are omitted.
"""

from server import main

if __name__ == "__main__":
    main()
