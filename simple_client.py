#!/usr/bin/env python3
"""
Simple Manual Test Client for the Try-On Studio API
Drives the same photo -> category -> prompt -> apply workflow as the web page, from a terminal.
"""

import sys
from datetime import datetime

import requests

import config
from logger import console_logger as logger
from tryon.capture import CaptureSession, OpenCVCamera
from tryon.client import TryOnApiClient
from tryon.composer import Category
from tryon.exceptions import AuthenticationError
from tryon.presentation import save_result
from tryon.workflow import TryOnWorkflow

COMMANDS = (
    "Commands: /file <path> | /camera | /category <makeup|clothes|style-advice|other> | "
    "/prompt <text> | /apply | /download [path] | /reset | /login <email> <password> | "
    "/signup <email> <password> | /status | /quit"
)


class SimpleClient:
    def __init__(self, base_url: str = config.TRYON_API_URL, camera_index: int = 0):
        self.api = TryOnApiClient(base_url)
        self.workflow = TryOnWorkflow(self.api, CaptureSession(OpenCVCamera(camera_index)))

    def log(self, message):
        timestamp = datetime.now().strftime("%H:%M:%S")
        print(f"[{timestamp}] {message}")

    def load_file(self, path: str):
        try:
            self.workflow.capture.load_file(path)
            self.log("📷 Photo uploaded successfully.")
        except OSError as e:
            self.log(f"❌ Could not read {path}: {e}")

    def enable_camera(self):
        warning = self.workflow.capture.enable_camera()
        if warning:
            self.log(f"⚠️ Camera access denied: {warning}")
        else:
            self.log("🎥 Camera enabled. A frame is captured when you /apply.")

    def set_category(self, tag: str):
        category = Category.parse(tag)
        self.workflow.category = category.value
        self.log(f"🏷️ Category: {category.value}")

    def apply(self):
        self.log("✨ Generating…")
        view = self.workflow.apply()
        if view.error:
            self.log(f"❌ Generation failed: {view.error}")
        elif view.message:
            self.log(f"📝 Model replied with text only: {view.message}")
        else:
            self.log("✅ Image generated! Use /download to save it.")

    def download(self, destination: str = None):
        view = self.workflow.result
        if view is None or not view.can_download:
            self.log("❌ No generated image to download.")
            return
        try:
            path = save_result(view.image_url, destination)
            self.log(f"💾 Saved {path}")
        except (OSError, requests.RequestException) as e:
            self.log(f"❌ Download failed: {e}")

    def login(self, email: str, password: str):
        try:
            self.api.token = self.api.login(email, password)
            self.log(f"🔑 Logged in as {email}")
        except AuthenticationError as e:
            self.log(f"❌ {e}")
        except requests.RequestException as e:
            self.log(f"❌ Login failed: {e}")

    def signup(self, email: str, password: str):
        try:
            user = self.api.signup(email, password)
            self.log(f"👤 Account created: {user.get('email')} (id={user.get('id')})")
        except requests.RequestException as e:
            self.log(f"❌ Signup failed: {e}")

    def status(self):
        capture = self.workflow.capture
        self.log(
            f"state={capture.state.value} category={self.workflow.category} "
            f"prompt={self.workflow.prompt!r} can_submit={self.workflow.can_submit} "
            f"logged_in={bool(self.api.token)}"
        )

    def close(self):
        self.workflow.reset()


def run_interactive(client: SimpleClient):
    print("💬 Interactive Try-On")
    print("=" * 50)
    print(COMMANDS)
    try:
        while True:
            try:
                raw = input("\n👤 > ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not raw:
                continue
            command, _, rest = raw.partition(" ")
            command = command.lower()
            rest = rest.strip()
            if command in {"/quit", "/exit", "quit", "exit", "q"}:
                break
            if command == "/file":
                if not rest:
                    client.log("Usage: /file <path>")
                    continue
                client.load_file(rest)
            elif command == "/camera":
                client.enable_camera()
            elif command == "/category":
                client.set_category(rest)
            elif command == "/prompt":
                client.workflow.prompt = rest
                client.log(f"✏️ Prompt set: {rest}")
            elif command == "/apply":
                client.apply()
            elif command == "/download":
                client.download(rest or None)
            elif command == "/reset":
                client.workflow.reset()
                client.log("🔄 Reset. Camera released.")
            elif command in {"/login", "/signup"}:
                parts = rest.split()
                if len(parts) != 2:
                    client.log(f"Usage: {command} <email> <password>")
                    continue
                getattr(client, command[1:])(*parts)
            elif command == "/status":
                client.status()
            else:
                # Bare text is treated as the prompt, like typing into the page's text area
                client.workflow.prompt = raw
                client.log(f"✏️ Prompt set: {raw}")
    finally:
        client.close()


def run_quick_test(client: SimpleClient, image_path: str):
    print("🚀 Running Quick Test")
    print("=" * 50)
    client.load_file(image_path)
    test_requests = [
        (Category.MAKEUP, "natural nude lipstick and light mascara"),
        (Category.CLOTHES, "a navy linen blazer over a white t-shirt"),
        (Category.STYLE_ADVICE, "a minimalist smart-casual look"),
    ]
    try:
        for i, (category, prompt) in enumerate(test_requests, 1):
            print(f"\n--- Test {i}/{len(test_requests)} ({category.value}) ---")
            client.workflow.category = category.value
            client.workflow.prompt = prompt
            client.apply()
    finally:
        client.close()


# ---------------- Entry Point ----------------

def main():
    print("🎯 Try-On Studio Simple Test Client")
    logger.info(f"Using API at {config.TRYON_API_URL}")
    client = SimpleClient()

    print("\nSelect test type:")
    print("1. Quick automated test")
    print("2. Interactive try-on")
    print("3. Exit")
    try:
        test_choice = input("\nEnter test choice (1-3): ").strip()
        if test_choice == "1":
            image_path = input("Path to a photo: ").strip()
            run_quick_test(client, image_path)
        elif test_choice == "2":
            run_interactive(client)
        elif test_choice == "3":
            print("👋 Goodbye!")
            sys.exit(0)
        else:
            print("❌ Invalid test choice. Please enter 1, 2, or 3.")
            return main()
    except KeyboardInterrupt:
        client.close()
        print("\n👋 Goodbye!")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Client error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
