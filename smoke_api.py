import subprocess
import time
import requests
import signal

BASE_URL = "http://127.0.0.1:8080"

UVICORN_CMD = [
    "python3",
    "-m",
    "uvicorn",
    "task_manager.main:app",
    "--host",
    "127.0.0.1",
    "--port",
    "8080",
]


def wait_for_server(url, timeout=10.0):
    start = time.time()
    while time.time() - start < timeout:
        try:
            requests.get(url, timeout=1.0)
            return True
        except requests.RequestException:
            time.sleep(0.2)
    return False


def main():
    print("Starting uvicorn server...")
    proc = subprocess.Popen(UVICORN_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        ready = wait_for_server(f"{BASE_URL}/docs", timeout=15.0)
        if not ready:
            print("Server did not become ready in time")
            return

        print("Server ready, running test requests")

        r = requests.post(f"{BASE_URL}/tasks", json={"title": "Buy milk", "description": "2%"})
        print("POST /tasks ->", r.status_code, r.text)
        r = requests.post(
            f"{BASE_URL}/tasks",
            json={"title": "Pay rent", "description": "rent", "is_important": True},
        )
        print("POST /tasks ->", r.status_code, r.text)

        first_id = 0
        r = requests.post(f"{BASE_URL}/tasks/{first_id}/done")
        print(f"POST /tasks/{first_id}/done ->", r.status_code, r.text)

        for path in ("/tasks/completed", "/tasks/important", "/tasks/count"):
            r = requests.get(f"{BASE_URL}{path}")
            print(f"GET {path} ->", r.status_code, r.text)

        r = requests.delete(f"{BASE_URL}/tasks/{first_id}")
        print(f"DELETE /tasks/{first_id} ->", r.status_code, r.text)
        r = requests.get(f"{BASE_URL}/tasks/{first_id}")
        print(f"GET /tasks/{first_id} ->", r.status_code, r.text)

    finally:
        print("Stopping server")
        proc.send_signal(signal.SIGINT)
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()


if __name__ == "__main__":
    main()
