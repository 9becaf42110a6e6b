#!/usr/bin/env python3
"""
Startup script for the charger simulator with its operator console.
"""
import sys

from chargersim.cli import main


def print_instructions():
    """Print startup instructions."""
    print("🔌 OCPP Charger Simulator")
    print("=" * 50)
    print()
    print("📋 What this does:")
    print("✅ Connects one simulated charge point to your Central System")
    print("✅ Answers RemoteStart/RemoteStop, GetConfiguration and friends")
    print("✅ Sends MeterValues while a transaction is running")
    print()
    print("💡 Examples:")
    print("   python start_simulator.py ws://localhost:9000 -i CP001")
    print("   python start_simulator.py http://localhost:8080/ocpp -i CP001 -p 9100")
    print()


if __name__ == "__main__":
    print_instructions()
    sys.exit(main())
