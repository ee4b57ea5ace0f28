# Workers: long-running processes driven by a scheduler.
# Run from backend/ with:
#   python -m workers.kaspa_wallet_worker
