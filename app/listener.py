#!/usr/bin/env python3
"""
macOS Music listener: prints one JSON line per `com.apple.Music.playerInfo`
distributed notification. Spawned by observer.PlayerObserver; needs PyObjC.
"""

import json
import sys
import time

import Foundation
import objc
from PyObjCTools import AppHelper

NOTIFICATION = "com.apple.Music.playerInfo"

# userInfo key -> event data key
_FIELDS = {
    "Name": "name",
    "Artist": "artist",
    "Album": "album",
    "Player State": "playerState",
    "Total Time": "totalTime",       # millis
    "Elapsed Time": "elapsedTime",
}


def event_from_userinfo(userinfo: dict) -> dict:
    data = {}
    for key, out in _FIELDS.items():
        value = userinfo.get(key)
        if value is None:
            continue
        data[out] = float(value) if out in ("totalTime", "elapsedTime") else str(value)
    return {"type": "music_event", "timestamp": time.time(), "data": data}


class PlayerInfoObserver(Foundation.NSObject):
    def playerInfo_(self, notification):
        userinfo = dict(notification.userInfo() or {})
        sys.stderr.write(f"DEBUG: notification keys: {sorted(userinfo)}\n")
        print(json.dumps(event_from_userinfo(userinfo)), flush=True)


def main():
    observer = PlayerInfoObserver.alloc().init()
    center = Foundation.NSDistributedNotificationCenter.defaultCenter()
    center.addObserver_selector_name_object_(
        observer, objc.selector(observer.playerInfo_, signature=b"v@:@"), NOTIFICATION, None
    )
    AppHelper.runConsoleEventLoop(installInterrupt=True)


if __name__ == "__main__":
    main()
