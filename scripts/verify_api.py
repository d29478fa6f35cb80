import httpx
import os

PORT = os.environ.get("MUSIC_CATALOG_PORT", "8080")
BASE_URL = f"http://127.0.0.1:{PORT}"


def test_api():
    song = {"group": "Muse", "song": "Supermassive Black Hole"}

    print(f"Running smoke check against {BASE_URL}...")
    try:
        with httpx.Client(base_url=BASE_URL, trust_env=False, timeout=10.0) as client:
            info = client.get("/info")
            print(f"/info -> {info.status_code} {info.json()}")

            created = client.post("/songs", json=song)
            print(f"POST /songs -> {created.status_code}")
            if created.status_code not in (201, 409):
                print(f"Error Response: {created.text}")
                return

            updated = client.put(
                f"/songs/{song['song']}",
                json={
                    "release_date": "2006-06-19",
                    "text": {"verses": ["Ooh baby, don't you know I suffer?", "Ooh baby, can you hear me moan?"]},
                },
            )
            print(f"PUT /songs/... -> {updated.status_code} {updated.json()}")

            lyrics = client.get(f"/songs/{song['song']}/lyrics", params={"verse_page": 1, "verse_limit": 1})
            print(f"GET lyrics -> {lyrics.status_code} {lyrics.json()}")

            listing = client.get("/songs", params={"field": "artist_name", "value": "mus"})
            print(f"GET /songs -> {listing.status_code} total_items={listing.json().get('total_items')}")

            deleted = client.delete(f"/songs/{song['song']}")
            print(f"DELETE /songs/... -> {deleted.status_code}")

            gone = client.get(f"/songs/{song['song']}/lyrics")
            if deleted.status_code == 204 and gone.status_code == 404:
                print("\n✅ Verification SUCCESS")
            else:
                print("\n❌ Verification FAILED")
    except httpx.HTTPError as e:
        print(f"Request Failed: {e}")


if __name__ == "__main__":
    test_api()
