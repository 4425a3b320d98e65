SETTINGS_TEMPLATE = """
# Example airflow-stack settings. Every key is optional.
env_file: .env
env_template: .env.template
env_prod_template: .env.prod.template

# Shared resources declared as external in docker-compose.yaml.
# EXTERNAL_NETWORK_NAME / POSTGRES_EXTERNAL_VOLUME_NAME override these.
network_name: web
volume_name: airflow-database-volume

compose_command: [docker, compose]
compose_prod_files:
  - docker-compose.yaml
  - docker-compose.override.yaml
  - docker-compose.prod.yaml

# Target of `airflow-stack sync`.
sync_remote: origin
sync_branch: main
"""

COMMAND_GROUPS = {
    "general": {
        "setup": "🛠️ Prepare the environment",
        "sync": "❗️ Sync with the remote branch (discards local changes!)",
        "prune": "🧹 Clean up unused Docker images",
        "init": "📝 Write a starter airflow_stack.yml",
        "env-status": "🔎 Show the state of the .env file",
        "help": "🤔 Show this help message",
        "version": "Print the installed airflow-stack version",
    },
    "dev": {
        "up": "🚀 Start containers (and build if necessary)",
        "down": "🛑 Stop containers",
        "restart": "🔄 Restart running containers",
        "rebuild": "💥 Rebuild images and restart all services",
        "build": "🔨 Build or rebuild service images",
        "status": "📊 Show container status",
        "logs": "📜 Show logs in real time",
        "pull": "📥 Pull images",
        "validate": "✅ Validate the compose configuration",
    },
    "prod": {
        "deploy": "🚀 Deploy the application to production",
        "pull-prod": "📥 Pull fresh images from the registry",
        "up-prod": "🚀 Start production services",
        "down-prod": "🛑 Stop production services",
        "restart-prod": "🔄 Restart production services",
        "validate-prod": "✅ Validate the production compose configuration",
    },
}
