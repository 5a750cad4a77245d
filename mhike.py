#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
M-Hike hiking log (SQLite)

Commands:
  init                Create the database file and schema
  register            Create a user account
  add-hike            Record a hike for a user
  list                Print a user's hikes (newest date first) with observation counts
  search              Search a user's hikes by text and filters
  observe             Attach an observation to a hike
  complete            Mark a hike completed (or planned again with --undo)
  export              Export a user's hikes and observations to CSV
  serve               Run the HTTP API (uvicorn backend.api:app)

Notes:
- The database path comes from --db, then MHIKE_DB_PATH, then config.yaml (db_path).
- Dates are YYYY-MM-DD; observation times are ISO-8601 timestamps.
"""

import argparse
import datetime as dt
import logging
import os
import sys

import pandas as pd

from backend.db import HikeDatabase
from backend.domain.hike_rules import DIFFICULTIES, OBSERVATION_TYPES
from backend.logs import LogContext
from backend.services import auth_svc, hike_svc, observation_svc


def open_db(args) -> HikeDatabase:
    db = HikeDatabase(args.db)
    db.initialize()
    return db


# ---------------- Commands ----------------

def cmd_init(args):
    db = open_db(args)
    db.close()
    print(f"DB initialized at {db.db_path}.")


def cmd_register(args):
    db = open_db(args)
    try:
        log = LogContext(db, "REGISTER", user="cli")
        try:
            user = auth_svc.register(db, args.name, args.email, args.password, None, log)
        except ValueError as e:
            log.write("ERROR", str(e))
            raise SystemExit(f"Registration failed: {e}")
        log.write("OK")
        print(f"User #{user['id']} created for {user['email']}.")
    finally:
        db.close()


def cmd_add_hike(args):
    db = open_db(args)
    try:
        log = LogContext(db, "CREATE_HIKE", user="cli")
        data = {
            "name": args.name,
            "location": args.location,
            "date": args.date,
            "length": args.length,
            "difficulty": args.difficulty,
            "parking_available": args.parking,
            "description": args.description or "",
            "duration": args.duration,
        }
        log.set_payload(data)
        try:
            hike = hike_svc.add_hike(db, args.user_id, data, log)
        except (ValueError, LookupError) as e:
            log.write("ERROR", str(e))
            raise SystemExit(f"Could not add hike: {e}")
        log.write("OK")
        print(f"Hike #{hike['id']} added: {hike['name']} on {hike['date']}.")
    finally:
        db.close()


def _print_hikes(items):
    if not items:
        print("(none)")
        return
    df = pd.DataFrame(items)
    if "observations" in df.columns:
        df["observations"] = df["observations"].map(len)
    cols = [c for c in ("id", "date", "name", "location", "distance", "difficulty", "duration",
                        "parking_available", "completed", "observations") if c in df.columns]
    pd.set_option("display.width", 160)
    print(df[cols].to_string(index=False))


def cmd_list(args):
    db = open_db(args)
    try:
        _print_hikes(hike_svc.list_hikes(db, args.user_id))
    finally:
        db.close()


def cmd_search(args):
    db = open_db(args)
    try:
        items = hike_svc.search_hikes(
            db, args.user_id, args.term,
            name=args.name, location=args.location,
            min_length=args.min_length, max_length=args.max_length,
            date_from=args.date_from, date_to=args.date_to,
            difficulty=args.difficulty, status=args.status,
        )
        _print_hikes(items)
    finally:
        db.close()


def cmd_observe(args):
    db = open_db(args)
    try:
        log = LogContext(db, "CREATE_OBSERVATION", user="cli")
        when = args.time or dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")
        try:
            obs = observation_svc.add_observation(db, args.hike_id, args.type, when, args.comment, log)
        except (ValueError, LookupError) as e:
            log.write("ERROR", str(e))
            raise SystemExit(f"Could not add observation: {e}")
        log.write("OK")
        print(f"Observation #{obs['id']} ({obs['type']}) added to hike #{args.hike_id}.")
    finally:
        db.close()


def cmd_complete(args):
    db = open_db(args)
    try:
        log = LogContext(db, "COMPLETE_HIKE", user="cli")
        try:
            hike = hike_svc.set_completed(db, args.hike_id, not args.undo, log)
        except LookupError as e:
            log.write("ERROR", str(e))
            raise SystemExit(f"Could not update hike: {e}")
        log.write("OK")
        print(f"Hike #{hike['id']} is now {'completed' if hike['completed'] else 'planned'}.")
    finally:
        db.close()


def cmd_export(args):
    db = open_db(args)
    try:
        hikes = hike_svc.list_hikes(db, args.user_id)
    finally:
        db.close()

    obs_rows = [o for h in hikes for o in h.get("observations", [])]
    hikes_df = pd.DataFrame([{k: v for k, v in h.items() if k != "observations"} for h in hikes])
    obs_df = pd.DataFrame(obs_rows)

    out_dir = args.out or os.path.join(os.path.dirname(os.path.abspath(__file__)), "exports")
    os.makedirs(out_dir, exist_ok=True)
    hikes_df.to_csv(os.path.join(out_dir, f"hikes_user{args.user_id}.csv"), index=False, encoding="utf-8-sig")
    obs_df.to_csv(os.path.join(out_dir, f"observations_user{args.user_id}.csv"), index=False, encoding="utf-8-sig")
    print(f"{len(hikes_df)} hikes / {len(obs_df)} observations exported to {out_dir}")


def cmd_serve(args):
    import uvicorn

    if args.db:
        os.environ["MHIKE_DB_PATH"] = args.db
    uvicorn.run("backend.api:app", host=args.host, port=args.port)


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="M-Hike hiking log (SQLite)")
    parser.add_argument("--db", default=None, help="database file (default: MHIKE_DB_PATH / config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create database and schema")
    p_init.set_defaults(func=cmd_init)

    p_reg = sub.add_parser("register", help="create a user")
    p_reg.add_argument("--name", required=True)
    p_reg.add_argument("--email", required=True)
    p_reg.add_argument("--password", required=True)
    p_reg.set_defaults(func=cmd_register)

    p_add = sub.add_parser("add-hike", help="record a hike")
    p_add.add_argument("--user-id", required=True, type=int)
    p_add.add_argument("--name", required=True)
    p_add.add_argument("--location", required=True)
    p_add.add_argument("--date", required=True, help="YYYY-MM-DD")
    p_add.add_argument("--length", required=True, help="distance, e.g. 8.5")
    p_add.add_argument("--difficulty", required=True, choices=list(DIFFICULTIES))
    p_add.add_argument("--duration", required=True, help="e.g. '4-5 hours'")
    p_add.add_argument("--parking", action="store_true", help="parking available")
    p_add.add_argument("--description", required=False)
    p_add.set_defaults(func=cmd_add_hike)

    p_list = sub.add_parser("list", help="list a user's hikes")
    p_list.add_argument("--user-id", required=True, type=int)
    p_list.set_defaults(func=cmd_list)

    p_search = sub.add_parser("search", help="search a user's hikes")
    p_search.add_argument("--user-id", required=True, type=int)
    p_search.add_argument("term", nargs="?", default=None)
    p_search.add_argument("--name")
    p_search.add_argument("--location")
    p_search.add_argument("--min-length", type=float)
    p_search.add_argument("--max-length", type=float)
    p_search.add_argument("--date-from", help="YYYY-MM-DD")
    p_search.add_argument("--date-to", help="YYYY-MM-DD")
    p_search.add_argument("--difficulty", choices=list(DIFFICULTIES))
    p_search.add_argument("--status", choices=["all", "completed", "planned"])
    p_search.set_defaults(func=cmd_search)

    p_obs = sub.add_parser("observe", help="add an observation to a hike")
    p_obs.add_argument("--hike-id", required=True, type=int)
    p_obs.add_argument("--type", required=True, choices=list(OBSERVATION_TYPES))
    p_obs.add_argument("--comment", required=True)
    p_obs.add_argument("--time", required=False, help="ISO-8601 (default now, UTC)")
    p_obs.set_defaults(func=cmd_observe)

    p_done = sub.add_parser("complete", help="mark a hike completed")
    p_done.add_argument("--hike-id", required=True, type=int)
    p_done.add_argument("--undo", action="store_true", help="mark as planned instead")
    p_done.set_defaults(func=cmd_complete)

    p_exp = sub.add_parser("export", help="export hikes/observations to CSV")
    p_exp.add_argument("--user-id", required=True, type=int)
    p_exp.add_argument("--out", required=False, help="output directory (default ./exports)")
    p_exp.set_defaults(func=cmd_export)

    p_srv = sub.add_parser("serve", help="run the HTTP API")
    p_srv.add_argument("--host", default="127.0.0.1")
    p_srv.add_argument("--port", default=8000, type=int)
    p_srv.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
