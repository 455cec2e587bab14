"""Allow running as: python -m rfp_analyzer"""

from rfp_analyzer.main import cli

if __name__ == "__main__":
    cli()
