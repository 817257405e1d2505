"""
Shared fixtures: in-memory database, API client and sample snippets.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from api.main import create_app
from common.config import Settings
from common.db import create_session_factory, enable_sqlite_foreign_keys
from common.models import Base
from modules.rule_catalog import Tool

TEST_TOKEN = "test-token"

DOCKERFILE = """\
FROM node:16-alpine
WORKDIR /app
COPY package*.json ./
RUN npm install
COPY . .
EXPOSE 3000
CMD ["npm", "start"]
"""

KUBERNETES_MANIFEST = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
spec:
  replicas: 2
  selector:
    matchLabels:
      app: web
  template:
    metadata:
      labels:
        app: web
    spec:
      containers:
        - name: web
          image: nginx:1.25
          resources:
            limits:
              cpu: 500m
---
apiVersion: v1
kind: Service
metadata:
  name: web-service
spec:
  selector:
    app: web
  ports:
    - port: 80
"""

TERRAFORM_CONFIG = """\
provider "aws" {}

resource "aws_instance" "a" {
  ami           = data.aws_ami.ubuntu.id
  instance_type = "t3.micro"
  tags = {
    Name = "a"
  }
}

resource "aws_s3_bucket" "b" {
  bucket = "lab-artifacts"
}
"""

ANSIBLE_PLAYBOOK = """\
---
- name: Configure web server
  hosts: webservers
  become: yes
  become_user: root
  tasks:
    - name: Install nginx
      apt:
        name: nginx
        state: present
      notify: Restart nginx
    - name: Start nginx
      service:
        name: nginx
        state: started
  handlers:
    - name: Restart nginx
      service:
        name: nginx
        state: restarted
"""

JENKINSFILE = """\
pipeline {
    agent any
    stages {
        stage('Build') {
            steps {
                sh 'npm install'
            }
        }
        stage('Test') {
            steps {
                sh 'npm test'
            }
        }
        stage('Deploy') {
            steps {
                echo 'Deploying'
            }
        }
    }
    post {
        always {
            echo 'Done'
        }
    }
}
"""

HELM_CHART = """\
apiVersion: v2
name: webapp
description: A Helm chart for the web app
version: 0.1.0
appVersion: "1.0.0"
"""

VALID_SNIPPETS = {
    Tool.DOCKER: DOCKERFILE,
    Tool.KUBERNETES: KUBERNETES_MANIFEST,
    Tool.TERRAFORM: TERRAFORM_CONFIG,
    Tool.ANSIBLE: ANSIBLE_PLAYBOOK,
    Tool.JENKINS: JENKINSFILE,
    Tool.HELM: HELM_CHART,
}


@pytest.fixture
def valid_snippets() -> dict[Tool, str]:
    return dict(VALID_SNIPPETS)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker[Session]) -> TestClient:
    app = create_app()
    app.state.settings = Settings(
        static_token=TEST_TOKEN,
        database_url="sqlite://",
        execution_history_limit=50
    )
    app.state.session_factory = session_factory
    # no context manager: the lifespan would build a real engine
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {
        "Authorization": f"Bearer {TEST_TOKEN}",
        "X-User-Id": "u1",
    }
