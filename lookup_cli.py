"""Quick CLI check against a running Mikud server.

Usage:
    python lookup_cli.py                          # Run the sample addresses
    python lookup_cli.py "תל אביב" "פרישמן" 7 1  # city street [house [entrance]]

Start the server first with: uvicorn main:app --reload --port 8000
"""
import sys

import httpx

BASE = "http://localhost:8000"

SAMPLE_ADDRESSES = [
    {"city": "תל אביב", "street": "פרישמן", "houseNumber": 7, "entrance": 1},
    {"city": "ירושלים", "street": "הרצל", "houseNumber": 10},
    {"city": "חיפה", "street": "הנביאים", "houseNumber": 25},
    {},  # Should be rejected as invalid input
]


def lookup(address: dict):
    print(f"\n{'='*60}")
    print(f"ADDRESS: {address.get('street', '')} {address.get('houseNumber', '')}, {address.get('city', '')}")
    print('='*60)

    try:
        r = httpx.post(f"{BASE}/api/zip/lookup", json=address, timeout=30)
        data = r.json()

        if data["success"]:
            print(f"✓ Zipcode: {data['zipcode']}{' (cached)' if data['cached'] else ''}")
        else:
            print(f"✗ {data['error']['kind']}: {data['error']['message']}")

    except httpx.ConnectError:
        print("ERROR: Can't connect. Is the server running?")
        print("Start with: uvicorn main:app --reload --port 8000")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        print(f"ERROR: {e}")


def main():
    print("Checking server health...")
    try:
        h = httpx.get(f"{BASE}/api/health").json()
        print(f"✓ Server running | Cache: {h['cache']} ({h['cached_entries']} entries)")
    except httpx.HTTPError:
        print("✗ Server not running. Start it first!")
        return

    if len(sys.argv) > 1:
        fields = ["city", "street", "houseNumber", "entrance"]
        lookup(dict(zip(fields, sys.argv[1:])))
    else:
        for address in SAMPLE_ADDRESSES:
            lookup(address)
        # Second pass on the first address should come from cache
        lookup(SAMPLE_ADDRESSES[0])


if __name__ == "__main__":
    main()
