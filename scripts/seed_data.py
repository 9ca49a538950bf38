#!/usr/bin/env python3
"""
Seed script — creates a small dataset for trying out the ChopBox API.

Creates:
  • 8 users with completed profiles
  • A follow graph (each user follows 3 others)
  • 1-6 chops per user, so the leaderboard has a spread
  • Some favourites and comments

Run against a live API:
  python scripts/seed_data.py --api-url http://localhost:8000

All IDs are printed so you can use them in curl commands.
"""
import argparse
import random
import time

import httpx


BASE_USERS = [
    ("ada_eats", "Ada", "Lagos"),
    ("bayo_bites", "Bayo", "Ibadan"),
    ("chioma_chef", "Chioma", "Enugu"),
    ("dayo_dines", "Dayo", "Abuja"),
    ("efe_feasts", "Efe", "Warri"),
    ("funke_food", "Funke", "Lagos"),
    ("gbenga_grills", "Gbenga", "Akure"),
    ("halima_hungry", "Halima", "Kano"),
]

FOODS = ["jollof rice", "suya", "pounded yam", "egusi soup", "puff-puff", "moi moi", "akara", "pepper soup"]

SAMPLE_CHOPS = [
    "Best {food} in town, no contest.",
    "Tried making {food} at home tonight. Not bad for a first attempt!",
    "Who else thinks {food} tastes better the next day?",
    "Found a tiny spot that does {food} with extra pepper. Life changing.",
    "Sunday plans: {food} and a nap.",
    "Hot take: {food} is overrated. Fight me.",
    "My grandmother's {food} recipe will never be beaten.",
]

COMMENTS = ["Facts!", "Where is this place?", "Send some my way", "Hmm, not sure about that", "Recipe please!"]


def check(resp: httpx.Response) -> dict:
    if resp.is_error:
        print(f"  HTTP {resp.status_code} on {resp.request.method} {resp.request.url.path}: {resp.text}")
        return {}
    return resp.json() if resp.content else {}


def wait_for_api(client: httpx.Client, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for _ in range(retries):
        try:
            if client.get("/health").json().get("status") == "ok":
                print("  API is ready!\n")
                return
        except httpx.HTTPError:
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def main(api_url: str) -> None:
    with httpx.Client(base_url=api_url, timeout=10.0) as client:
        wait_for_api(client)

        # ── Create users ─────────────────────────────────────────────────
        print("Creating users...")
        user_ids: list[int] = []
        for username, firstname, location in BASE_USERS:
            result = check(client.post("/users/", json={"username": username, "email": f"{username}@example.com"}))
            uid = result.get("id")
            if not uid:
                print(f"  ✗ Failed to create {username}")
                continue
            check(client.put(
                f"/users/{uid}/profile",
                json={"firstname": firstname, "location": location, "best_food": random.choice(FOODS)},
            ))
            user_ids.append(uid)
            print(f"  ✓ {username} ({uid})")

        if not user_ids:
            print("No users created — aborting")
            return

        # ── Create follow graph ──────────────────────────────────────────
        print("\nCreating follow relationships...")
        for follower_id in user_ids:
            others = [u for u in user_ids if u != follower_id]
            for followee_id in random.sample(others, k=min(3, len(others))):
                check(client.post("/users/follow", json={"follower_id": follower_id, "followee_id": followee_id}))
        print("  ✓ Follow graph created")

        # ── Create chops ─────────────────────────────────────────────────
        print("\nCreating chops...")
        chop_ids: list[int] = []
        for user_id in user_ids:
            for _ in range(random.randint(1, 6)):
                text = random.choice(SAMPLE_CHOPS).format(food=random.choice(FOODS))
                result = check(client.post("/chops/", json={"user_id": user_id, "chops_name": text}))
                if result.get("id"):
                    chop_ids.append(result["id"])
        print(f"  ✓ {len(chop_ids)} chops created")

        # ── Favourites and comments ──────────────────────────────────────
        print("\nAdding favourites and comments...")
        favourites = comments = 0
        for chop_id in chop_ids:
            for user_id in random.sample(user_ids, k=random.randint(0, 4)):
                check(client.post(f"/chops/favourite/{chop_id}", json={"user_id": user_id}))
                favourites += 1
            if random.random() < 0.4:
                check(client.post(
                    f"/chops/{chop_id}/comments",
                    json={"user_id": random.choice(user_ids), "body": random.choice(COMMENTS)},
                ))
                comments += 1
        print(f"  ✓ {favourites} favourites, {comments} comments added")

    # ── Print summary ────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    u = user_ids[0]
    print(f"# Home feed + leaderboard for '{BASE_USERS[0][0]}':")
    print(f"  curl -s '{api_url}/?user_id={u}' | python3 -m json.tool\n")
    print("# Top 5 choppers:")
    print(f"  curl -s '{api_url}/users/top?limit=5' | python3 -m json.tool\n")
    print("# Check Prometheus metrics:")
    print(f"  curl -s '{api_url}/metrics' | grep -E 'chops_created|favourites_total'")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the ChopBox API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
