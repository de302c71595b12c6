"""Core building blocks shared across ledger, composer and widget flow."""
