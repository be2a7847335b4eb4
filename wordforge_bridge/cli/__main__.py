"""Allow running the CLI via ``python -m wordforge_bridge.cli``."""

from wordforge_bridge.cli import main

main()
