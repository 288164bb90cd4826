from locust import HttpUser, task, between
import random
import string


class PRReviewerUser(HttpUser):
    wait_time = between(0.5, 2.0)

    def on_start(self):
        """Runs once per simulated user: own team and a few PRs"""
        self.team_name = f"team_{self._generate_id()}"
        self.user_ids = [f"u_{self._generate_id()}" for _ in range(5)]

        team_data = {
            "team_name": self.team_name,
            "members": [
                {"user_id": uid, "username": f"User_{uid}", "is_active": True}
                for uid in self.user_ids
            ]
        }
        self.client.post("/team/add", json=team_data)

        # pr id -> reviewers from the last response seen for it
        self.open_prs = {}
        for i in range(3):
            self._create_pr(f"PR {i}")

    def _generate_id(self):
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=8))

    def _create_pr(self, name):
        pr_id = f"pr_{self._generate_id()}"
        response = self.client.post("/pullRequest/create", json={
            "pull_request_id": pr_id,
            "pull_request_name": name,
            "author_id": random.choice(self.user_ids)
        })
        if response.status_code == 201:
            self.open_prs[pr_id] = response.json()["pr"]["assigned_reviewers"]

    @task(3)
    def get_team(self):
        self.client.get(f"/team/get?team_name={self.team_name}")

    @task(2)
    def get_user_reviews(self):
        user_id = random.choice(self.user_ids)
        self.client.get(f"/users/getReview?user_id={user_id}")

    @task(2)
    def create_pr(self):
        self._create_pr("New PR")

    @task(1)
    def merge_pr(self):
        if self.open_prs:
            pr_id = random.choice(list(self.open_prs))
            response = self.client.post("/pullRequest/merge", json={"pull_request_id": pr_id})
            if response.status_code == 200:
                del self.open_prs[pr_id]

    @task(1)
    def set_user_active(self):
        user_id = random.choice(self.user_ids)
        self.client.post("/users/setIsActive", json={
            "user_id": user_id,
            "is_active": random.choice([True, False])
        })

    @task(1)
    def reassign_reviewer(self):
        candidates = [(pr_id, reviewers) for pr_id, reviewers in self.open_prs.items() if reviewers]
        if not candidates:
            return
        pr_id, reviewers = random.choice(candidates)
        response = self.client.post("/pullRequest/reassign", json={
            "pull_request_id": pr_id,
            "old_user_id": random.choice(reviewers)
        })
        if response.status_code == 200:
            self.open_prs[pr_id] = response.json()["pr"]["assigned_reviewers"]

    @task(1)
    def health(self):
        self.client.get("/health")
