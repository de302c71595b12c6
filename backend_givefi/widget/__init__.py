"""
Widget-side logic: donation context, ledger client, swap flow and pollers.
"""
