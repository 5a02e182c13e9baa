"""JobFlow: local job-search tracker with an AI career coach."""
