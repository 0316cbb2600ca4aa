"""
Obtain a Last.fm session key for LASTFM_SESSION_KEY.

Usage: python app/auth.py   (needs LASTFM_API_KEY and LASTFM_API_SECRET)
"""

import logging

import pylast

from config import Settings


def get_session_key(network: pylast.LastFMNetwork, wait=input) -> str:
    skg = pylast.SessionKeyGenerator(network)
    url = skg.get_web_auth_url()
    print("Authorize this application by visiting:")
    print(f"  {url}")
    wait("Press ENTER after authorizing... ")
    return skg.get_web_auth_session_key(url)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    settings = Settings.from_env()
    if not settings.api_key or not settings.api_secret:
        raise SystemExit(
            "LASTFM_API_KEY and LASTFM_API_SECRET are required "
            "(create them at https://www.last.fm/api/account/create)"
        )
    network = pylast.LastFMNetwork(api_key=settings.api_key, api_secret=settings.api_secret)
    try:
        session_key = get_session_key(network)
    except pylast.WSError as e:
        raise SystemExit(f"Last.fm refused the session request: {e}")
    print("Add this to your .env file:")
    print(f"LASTFM_SESSION_KEY={session_key}")


if __name__ == "__main__":
    main()
