#!/usr/bin/env python3
"""
Entry point for the bracket runner.

Usage:
    python run.py                                  # Run the gateway (default)
    python run.py gateway                          # Run the gateway explicitly
    python run.py play <teams_per_match> <total_teams>
                                                   # Play one tournament from the shell

Environment Variables:
    FLASK_ENV: development, production or testing (default: development)
    PORT: Port for the gateway (default: 5000)
    REMOTE_SERVICE_URL: Base URL of the remote tournament services
    REMOTE_TIMEOUT: Per-request timeout in seconds (default: 10)
    LOG_LEVEL: Logging level (default: INFO)
"""
import os
import sys
import logging


def run_gateway():
    """Run the gateway service."""
    from gateway.app import create_app

    app = create_app()
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    logging.getLogger(__name__).info(f"Starting gateway on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=debug)


def play(teams_per_match: int, total_teams: int) -> int:
    """Play one tournament, printing every event as it arrives."""
    from bracket_engine import HttpRemoteClient, is_valid_bracket_size, run_tournament
    from gateway.config import Config

    if not is_valid_bracket_size(teams_per_match, total_teams):
        print(f"total_teams must be a power of teams_per_match (got {total_teams}, {teams_per_match})")
        return 2

    with HttpRemoteClient(Config.REMOTE_SERVICE_URL, timeout=Config.REMOTE_TIMEOUT) as client:
        final = run_tournament(
            client, teams_per_match, total_teams,
            listeners=[lambda event: print(event.to_json())]
        )

    return 0 if final.type.value == 'tournament.completed' else 1


if __name__ == '__main__':
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    mode = sys.argv[1] if len(sys.argv) > 1 else 'gateway'

    if mode == 'gateway':
        run_gateway()
    elif mode == 'play' and len(sys.argv) == 4:
        sys.exit(play(int(sys.argv[2]), int(sys.argv[3])))
    else:
        print(f"Unknown mode: {' '.join(sys.argv[1:])}")
        print("Usage: python run.py [gateway | play <teams_per_match> <total_teams>]")
        sys.exit(1)
