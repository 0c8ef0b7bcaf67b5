#!/usr/bin/env python3

import getpass
import os
import pwd


def get_current_username() -> str:
    return getpass.getuser()


def get_user_home(username: str) -> str:
    try:
        return pwd.getpwnam(username).pw_dir
    except KeyError:
        return os.path.expanduser(f"~{username}")
