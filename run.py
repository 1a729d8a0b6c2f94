"""Quick run script for RFP Intake."""

# Load environment variables
from dotenv import load_dotenv
load_dotenv()


def main():
    """Main entry point."""
    from rfp_intake.main import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
