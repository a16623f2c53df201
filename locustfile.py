import random
import string

from locust import task, FastHttpUser

ORGANIZATION_ID = "1"
VISIBILITIES = ["available_now", "available_future", "foster_pending"]


class ShelterStaffUser(FastHttpUser):
    host = "http://127.0.0.1:8000"

    def on_start(self):
        self.animal_ids = []

    def _headers(self) -> dict:
        return {"x-organization-id": ORGANIZATION_ID}

    @task
    def create_animal(self):
        with self.rest("POST", "/animals", headers=self._headers(), json={
            "name": "".join(random.choices(string.ascii_letters, k=8)),
            "priority": random.random() < 0.2,
            "foster_visibility": random.choice(VISIBILITIES),
        }) as resp:
            if resp.js is not None and "id" in resp.js:
                self.animal_ids.append(resp.js["id"])

    @task
    def create_group(self):
        if len(self.animal_ids) < 2:
            return
        members = random.sample(self.animal_ids, k=min(len(self.animal_ids), random.randint(2, 4)))
        with self.rest("POST", "/groups", headers=self._headers(), json={"animal_ids": members}):
            ...

    @task(5)
    def list_animals(self):
        params = random.choice(["", "?priority=true", "?inGroup=false&sortByCreatedAt=oldest", "?search=a&page=2"])
        with self.rest("GET", f"/animals{params}", headers=self._headers(), name="/animals"):
            ...

    @task(3)
    def list_groups(self):
        params = random.choice(["", "?foster_visibility=available_now"])
        with self.rest("GET", f"/groups{params}", headers=self._headers(), name="/groups"):
            ...

    @task(5)
    def list_fosters_needed(self):
        params = random.choice(["", "?type=groups", "?availability=available_now&pageSize=20"])
        with self.rest("GET", f"/fosters-needed{params}", headers=self._headers(), name="/fosters-needed"):
            ...
