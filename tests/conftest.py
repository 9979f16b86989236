"""Shared pytest fixtures for all tests."""

import json
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timezone
from pathlib import Path

import pytest

FROZEN_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

PETSTORE_YAML = """openapi: 3.0.0
info:
  title: Pet Store API
  version: 2.0.0
servers:
  - url: https://api.petstore.io:8443/v1/
paths:
  /pets:
    get:
      tags: [pets]
      operationId: listPets
      summary: List pets
      parameters:
        - name: limit
          in: query
          schema:
            type: integer
            default: 20
      responses:
        '200':
          description: OK
    post:
      tags: [pets]
      operationId: createPet
      summary: Create a pet
      requestBody:
        required: true
        content:
          application/json:
            schema:
              $ref: '#/components/schemas/NewPet'
      responses:
        '201':
          description: Created
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/Pet'
  /pets/{petId}:
    parameters:
      - name: petId
        in: path
        required: true
        schema:
          type: string
    get:
      tags: [pets]
      operationId: getPet
      summary: Get a pet
      responses:
        '200':
          description: OK
    delete:
      tags: [pets]
      operationId: deletePet
      responses:
        '204':
          description: Deleted
  /stores/{storeId}/orders:
    post:
      tags: [store]
      operationId: placeOrder
      summary: Place an order
      parameters:
        - name: storeId
          in: path
          required: true
          schema:
            type: integer
        - name: X-Request-Id
          in: header
          schema:
            type: string
            example: req-1
      requestBody:
        content:
          application/json:
            example:
              petId: 7
              quantity: 2
      responses:
        '200':
          description: OK
components:
  schemas:
    NewPet:
      type: object
      required: [name]
      properties:
        name:
          type: string
          minLength: 2
          maxLength: 5
        age:
          type: integer
          minimum: 0
          maximum: 30
        email:
          type: string
          format: email
    Pet:
      type: object
      properties:
        id:
          type: integer
        ownerId:
          type: integer
        name:
          type: string
  securitySchemes:
    bearerAuth:
      type: http
      scheme: bearer
    apiKey:
      type: apiKey
      in: header
      name: X-API-Key
"""

SWAGGER_JSON = {
    "swagger": "2.0",
    "info": {"title": "Legacy API", "version": "1.0"},
    "host": "api.x.com",
    "schemes": ["http"],
    "basePath": "/v1",
    "consumes": ["application/json"],
    "paths": {
        "/users/{id}": {
            "get": {
                "operationId": "getUser",
                "parameters": [{"name": "id", "in": "path", "required": True, "type": "string"}],
                "responses": {"200": {"description": "OK", "schema": {"$ref": "#/definitions/User"}}},
            },
            "put": {
                "operationId": "updateUser",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "type": "string"},
                    {"name": "body", "in": "body", "schema": {"$ref": "#/definitions/User"}},
                ],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/login": {
            "post": {
                "operationId": "login",
                "consumes": ["application/x-www-form-urlencoded"],
                "parameters": [
                    {"name": "username", "in": "formData", "type": "string", "required": True},
                    {"name": "password", "in": "formData", "type": "string"},
                ],
                "responses": {"200": {"description": "OK"}},
            }
        },
    },
    "definitions": {
        "User": {
            "type": "object",
            "properties": {
                "userId": {"type": "integer"},
                "name": {"type": "string", "example": "Ada"},
            },
        }
    },
    "securityDefinitions": {"basicAuth": {"type": "basic"}},
}


def _har_entry(method: str, url: str, **request_extra) -> dict:
    request = {"method": method, "url": url, "headers": [], "queryString": []}
    request.update(request_extra)
    return {"request": request, "response": {"status": 200, "statusText": "OK"}}


HAR_DOCUMENT = {
    "log": {
        "version": "1.2",
        "creator": {"name": "WebInspector", "version": "537.36"},
        "entries": [
            _har_entry(
                "GET",
                "https://shop.example.com/api/products?page=2&sort=name",
                headers=[
                    {"name": ":authority", "value": "shop.example.com"},
                    {"name": "Accept", "value": "application/json"},
                    {"name": "Cookie", "value": "session=abc"},
                ],
            ),
            _har_entry("GET", "https://shop.example.com/static/app.js"),
            _har_entry(
                "POST",
                "https://shop.example.com/api/cart",
                postData={"mimeType": "application/json; charset=utf-8", "text": '{"productId": 5, "qty": 1}'},
            ),
            _har_entry("GET", "https://shop.example.com/api/products?page=2&sort=name"),
            _har_entry("GET", "https://cdn.example.net/api/config"),
        ],
    }
}


@pytest.fixture
def temp_project_dir() -> Generator[Path, None, None]:
    """Create a temporary project directory for testing.

    Yields:
        Path object pointing to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def frozen_clock() -> Callable[[], datetime]:
    """Clock that always returns 2024-01-02T03:04:05Z."""
    return lambda: FROZEN_NOW


@pytest.fixture
def petstore_spec_path(temp_project_dir: Path) -> Path:
    """Write the OpenAPI 3 pet store spec (tags, security, bodies) to disk.

    Args:
        temp_project_dir: Temporary directory fixture

    Returns:
        Path to openapi.yaml
    """
    spec_path = temp_project_dir / "openapi.yaml"
    spec_path.write_text(PETSTORE_YAML, encoding="utf-8")
    return spec_path


@pytest.fixture
def swagger_spec() -> dict:
    """Swagger 2.0 document with basePath, body and formData parameters."""
    return json.loads(json.dumps(SWAGGER_JSON))


@pytest.fixture
def swagger_spec_path(temp_project_dir: Path, swagger_spec: dict) -> Path:
    """Write the Swagger 2.0 spec to disk as JSON.

    Returns:
        Path to swagger.json
    """
    spec_path = temp_project_dir / "swagger.json"
    spec_path.write_text(json.dumps(swagger_spec, indent=2), encoding="utf-8")
    return spec_path


@pytest.fixture
def har_document() -> dict:
    """HAR capture with query strings, a static asset, a duplicate and a second host."""
    return json.loads(json.dumps(HAR_DOCUMENT))


@pytest.fixture
def har_path(temp_project_dir: Path, har_document: dict) -> Path:
    """Write the HAR capture to disk.

    Returns:
        Path to session.har
    """
    path = temp_project_dir / "session.har"
    path.write_text(json.dumps(har_document), encoding="utf-8")
    return path
