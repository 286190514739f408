#!/usr/bin/env python3
"""
Basic usage example for the placement mock client.

This example walks through a whole session:
1. Connecting to the server
2. Sending the configuration requests
3. Running calibration marker by marker
4. Starting work and watching the demo objects

Prerequisites:
- Server running: placement-mock-server
"""

import time
from placement_mock import SessionClient, MessageType


def main():
    # Replace with your server's IP address
    server_host = "localhost"

    print(f"Connecting to placement mock at {server_host}...")

    with SessionClient(server_host, port=8080, timeout=10.0) as client:
        if not client.is_connected:
            print("Failed to connect to placement mock")
            return

        print("Connected!")

        print("\nConfiguring...")
        client.configure_object_types(types=["small-photo"])
        client.configure_objects()
        client.configure_sizing(width=1920, height=1080)
        for _ in range(3):
            envelope = client.receive()
            print(f"  <- {envelope.type}" if envelope else "  (timeout)")

        print("\nCalibrating (welcome screen first)...")
        start = time.monotonic()
        client.listen_to_start()
        while True:
            envelope = client.receive(timeout=30.0)
            if envelope is None:
                print("  (timeout)")
                break
            elapsed = time.monotonic() - start
            print(f"  t={elapsed:5.1f}s <- {envelope.type} {envelope.message}")
            if envelope.type == MessageType.CALIBRATION_DONE:
                break

        print("\nWorking...")
        start = time.monotonic()
        client.work_init()
        for envelope in client.receive_all(timeout=8.0):
            elapsed = time.monotonic() - start
            print(f"  t={elapsed:5.1f}s <- {envelope.type} {envelope.message}")

    print("Done!")


if __name__ == "__main__":
    main()
