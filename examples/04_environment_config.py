"""
Environment Configuration Example.

Loads settings from CHATROUTES_* variables (or a .env file) and prints a
summary with the API key masked.

    CHATROUTES_API_KEY=cr_live_xxx
    CHATROUTES_TIMEOUT=60
    CHATROUTES_LOG_ENABLED=true
    CHATROUTES_LOG_FORMAT=colored
"""

from chatroutes import ChatRoutesClient, config_summary, load_from_env


def main():
    config = load_from_env(retry_attempts=5)
    print(config_summary(config))

    with ChatRoutesClient(config=config) as client:
        me = client.auth.me()
        print(f"\nLogged in as {me.email}")


if __name__ == "__main__":
    main()
