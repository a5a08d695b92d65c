import sys

from sentinel.server import run_server

if __name__ == "__main__":
    print("--- Starting Sentinel Report Add-in Server ---")
    port = int(sys.argv[1]) if len(sys.argv) > 1 else None

    try:
        run_server(port=port)
    except KeyboardInterrupt:
        print("\nServer stopped.")
