# formarchive: form submission archive (S3) + retrieval API
