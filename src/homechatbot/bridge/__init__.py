"""Glue between the Matrix transport and the bot's commands."""
