import sys
from config import settings


def main():
    """
    ICT site entry point.
    Serves the landing page, live backtest API and contact relay.
    """
    from ui.app import app

    print("📈 ICT landing site starting...")
    print(f"🌐 http://{settings.SERVER_HOST}:{settings.SERVER_PORT}")

    app.run(host=settings.SERVER_HOST, port=settings.SERVER_PORT, debug=False)

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n🛑 Execution interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"\n🔥 Fatal System Error: {e}")
        sys.exit(1)
