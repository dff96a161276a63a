"""Environment configuration for GitHub access and CLI defaults."""

import os

from dotenv import load_dotenv

load_dotenv()

# Auth: PAT (simple) or GitHub App (higher rate limits)
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")

# GitHub App auth (optional, takes precedence over PAT if all are set)
GITHUB_APP_ID = os.environ.get("GITHUB_APP_ID")
GITHUB_APP_PRIVATE_KEY_PATH = os.environ.get("GITHUB_APP_PRIVATE_KEY_PATH")
GITHUB_APP_INSTALLATION_ID = os.environ.get("GITHUB_APP_INSTALLATION_ID")

# Analysis defaults, overridable by prmetrics.yaml and CLI flags
DEFAULT_REVIEWER = os.environ.get("PRMETRICS_REVIEWER", "coderabbitai[bot]")
DEFAULT_DAYS = os.environ.get("PRMETRICS_DAYS", "7")
DEFAULT_DATA_FILE = os.environ.get("PRMETRICS_DATA_FILE", "./temp/pr-data.json")

# Extraction settings
PER_PAGE = 100  # Max items per API page
CONCURRENT_PRS = 4  # Process this many PRs concurrently
PR_QUEUE_SIZE = 50  # Buffer size for PR queue
