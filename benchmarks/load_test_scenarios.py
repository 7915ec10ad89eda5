"""
Load testing scenarios menggunakan Locust.

Target adalah satu WorkerNode yang sudah berjalan. Setiap user
mengirim EXECUTE message ke /api/message, sama seperti controller.

Cara menjalankan:
  locust -f benchmarks/load_test_scenarios.py --host=http://localhost:5001
"""

from locust import HttpUser, task, between
import random
import time


def execute_message(fn, **kwargs):
    """Bangun EXECUTE message untuk satu remote function"""
    return {
        'msg_type': 'execute',
        'sender_id': 0,
        'data': {'call': {'__type__': 'call', 'fn': fn, 'kwargs': kwargs}},
        'timestamp': time.time()
    }


class NamespaceUser(HttpUser):
    """
    Simulate controller yang bind dan read values di namespace worker.
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        """Called saat user start"""
        self.user_id = random.randint(1, 1000)
        self.names = [f"value_{i}" for i in range(10)]

    @task(3)
    def bind_value(self):
        """Bind value ke namespace"""
        name = random.choice(self.names)

        with self.client.post(
            "/api/message",
            json=execute_message('bind', name=name, value=self.user_id),
            catch_response=True
        ) as response:
            if response.status_code == 200 and response.json().get('status') == 'ok':
                response.success()
            else:
                response.failure(f"HTTP {response.status_code}")

    @task(5)
    def read_value(self):
        """Read value; unbound name dihitung sukses karena itu jawaban yang valid"""
        name = random.choice(self.names)

        with self.client.post(
            "/api/message",
            json=execute_message('read', name=name),
            catch_response=True
        ) as response:
            if response.status_code != 200:
                response.failure(f"HTTP {response.status_code}")
                return

            data = response.json()
            if data.get('status') == 'ok' or data.get('error_type') == 'UnboundNameError':
                response.success()
            else:
                response.failure(data.get('message', 'unknown error'))

    @task(1)
    def hostname(self):
        """Host query seperti topology discovery"""
        self.client.post("/api/message", json=execute_message('hostname'))


class MonitoringUser(HttpUser):
    """
    Simulate monitoring yang polling status dan metrics.
    """
    wait_time = between(1.0, 3.0)

    @task(2)
    def status(self):
        self.client.get("/api/status")

    @task(1)
    def metrics(self):
        self.client.get("/api/metrics")

    @task(1)
    def health(self):
        self.client.get("/health")
