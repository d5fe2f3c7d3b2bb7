"""Tests for the OpenAPI description compiler."""

import pytest

from specbridge.openapi.models import (
    PLACEHOLDER_BASE_URL,
    CompileStatus,
    HttpMethod,
    ParameterLocation,
)
from specbridge.openapi.parser import (
    generate_tool_name,
    generate_tools,
    get_api_name,
    is_description_file,
    parse_openapi_spec,
)


class TestApiName:
    """Namespace derivation from file names."""

    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("my-custom_Api.yaml", "mycustomapi"),
            ("/some/dir/Petstore.json", "petstore"),
            ("github.yml", "github"),
            ("stripe-payments.v2.json", "stripepayments.v2"),
        ],
    )
    def test_api_name(self, file_name, expected):
        """Test that extension is dropped, case folded and separators removed."""
        assert get_api_name(file_name) == expected


class TestDescriptionFile:
    """Candidate file filtering."""

    @pytest.mark.parametrize("name", ["petstore.json", "github.YAML", "api.yml"])
    def test_accepts_description_extensions(self, name):
        assert is_description_file(name)

    @pytest.mark.parametrize(
        "name", ["README.md", "package.json", "tsconfig.json", "notes.txt", ".env"]
    )
    def test_rejects_other_files(self, name):
        assert not is_description_file(name)


class TestToolNames:
    """Tool name generation."""

    def test_uses_operation_id(self):
        """Test that an explicit identifier wins."""
        name = generate_tool_name("petstore", {"operationId": "getPetById"}, "/pet/{petId}", "get")
        assert name == "petstore_getPetById"

    def test_synthesizes_from_path(self):
        """Test that braced segments are removed and the rest joined."""
        assert generate_tool_name("ns", {}, "/a/{id}/b", HttpMethod.GET) == "ns_get_a_b"

    def test_strips_non_alphanumerics(self):
        name = generate_tool_name("ns", {}, "/user-profiles/v1.2/{id}", "post")
        assert name == "ns_post_userprofiles_v12"

    def test_root_path(self):
        assert generate_tool_name("ns", {}, "/", "delete") == "ns_delete_root"
        assert generate_tool_name("ns", {}, "/{id}", "get") == "ns_get_root"


class TestGenerateTools:
    """Compilation of whole documents."""

    def test_one_tool_per_operation_in_document_order(self, petstore):
        tools = generate_tools(petstore, "petstore")

        assert [t.name for t in tools] == [
            "petstore_addPet",
            "petstore_findPetsByStatus",
            "petstore_getPetById",
            "petstore_deletePet",
            "petstore_get_store_inventory",
        ]

    def test_no_paths_yields_empty_list(self):
        """Test that a document without paths is not an error."""
        assert generate_tools({"openapi": "3.0.0", "info": {}}, "empty") == []
        assert generate_tools({"openapi": "3.0.0", "info": {}, "paths": {}}, "empty") == []

    def test_base_url_from_first_server(self, petstore):
        petstore["servers"].append({"url": "https://other.example.com"})
        tools = generate_tools(petstore, "petstore")
        assert {t.base_url for t in tools} == {"https://petstore.example.com/v1/"}

    def test_base_url_placeholder_without_servers(self, petstore):
        del petstore["servers"]
        tools = generate_tools(petstore, "petstore")
        assert tools[0].base_url == PLACEHOLDER_BASE_URL

    def test_description_fallbacks(self, petstore):
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        assert tools["petstore_addPet"].description == "Add a new pet to the store"
        assert tools["petstore_findPetsByStatus"].description == "Multiple status values can be provided"
        assert tools["petstore_get_store_inventory"].description == "GET /store/inventory"

    def test_path_level_parameters_come_first(self, petstore):
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}
        delete = tools["petstore_deletePet"]

        assert [(p.name, p.location) for p in delete.parameters] == [
            ("petId", ParameterLocation.PATH),
            ("api_key", ParameterLocation.HEADER),
            ("session", ParameterLocation.COOKIE),
        ]

    def test_required_defaults(self, petstore):
        """Test that path parameters are required and others optional unless declared."""
        petstore["paths"]["/pet/findByStatus"]["get"]["parameters"][1]["required"] = True
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        pet_id = tools["petstore_getPetById"].parameters[0]
        status, tags = tools["petstore_findPetsByStatus"].parameters
        assert pet_id.required is True
        assert status.required is False
        assert tags.required is True

    def test_duplicate_parameters_are_kept(self, petstore):
        petstore["paths"]["/pet/{petId}"]["get"]["parameters"] = [
            {"name": "petId", "in": "path", "schema": {"type": "string"}},
        ]
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        names = [p.name for p in tools["petstore_getPetById"].parameters]
        assert names == ["petId", "petId"]

    def test_reference_and_incomplete_parameters_are_dropped(self, petstore):
        petstore["paths"]["/pet/findByStatus"]["get"]["parameters"] += [
            {"$ref": "#/components/parameters/limit"},
            {"name": "noschema", "in": "query"},
            {"name": "payload", "in": "body", "schema": {"type": "object"}},
        ]
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        names = [p.name for p in tools["petstore_findPetsByStatus"].parameters]
        assert names == ["status", "tags"]

    def test_empty_schema_parameter_is_kept(self, petstore):
        """Test that an untyped schema still yields a parameter."""
        petstore["paths"]["/pet/findByStatus"]["get"]["parameters"].append(
            {"name": "filter", "in": "query", "schema": {}}
        )
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        params = tools["petstore_findPetsByStatus"].parameters
        assert [p.name for p in params] == ["status", "tags", "filter"]
        assert params[-1].schema_ == {}

    def test_numeric_operation_id(self):
        document = {"paths": {"/things": {"get": {"operationId": 5}}}}

        tools = generate_tools(document, "ns")

        assert [t.name for t in tools] == ["ns_5"]
        assert tools[0].operation_id == "5"

    def test_request_body_presence(self, petstore):
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}

        assert tools["petstore_addPet"].has_request_body
        assert not tools["petstore_getPetById"].has_request_body

    def test_metadata_is_retained(self, petstore):
        tools = {t.name: t for t in generate_tools(petstore, "petstore")}
        get_pet = tools["petstore_getPetById"]

        assert get_pet.operation_id == "getPetById"
        assert get_pet.method == HttpMethod.GET
        assert get_pet.security == [{"api_key": []}]
        assert tools["petstore_get_store_inventory"].operation_id is None
        assert tools["petstore_get_store_inventory"].security == []

    def test_malformed_operation_does_not_stop_siblings(self, petstore):
        """Test that one bad operation is skipped and the rest compile."""
        petstore["paths"]["/pet/{petId}"]["put"] = ["not", "an", "operation"]
        petstore["paths"]["/pet/{petId}"]["patch"] = {"parameters": 5}
        tools = generate_tools(petstore, "petstore")

        names = [t.name for t in tools]
        assert "petstore_getPetById" in names
        assert "petstore_deletePet" in names
        assert len(names) == 5

    def test_non_object_path_items_are_skipped(self, petstore):
        petstore["paths"]["/broken"] = "nope"
        petstore["paths"]["/empty"] = {"get": None}
        assert len(generate_tools(petstore, "petstore")) == 5


class TestParseOpenAPISpec:
    """Loading documents from disk."""

    @pytest.mark.asyncio
    async def test_compiles_yaml_document(self, write_spec, petstore):
        path = write_spec("pet-store.yaml", petstore)

        result = await parse_openapi_spec(path)

        assert result.status == CompileStatus.COMPILED
        assert result.ok
        assert result.spec.api_name == "petstore"
        assert result.spec.file_path == path
        assert len(result.spec.tools) == 5

    @pytest.mark.asyncio
    async def test_compiles_json_document(self, write_spec, petstore):
        result = await parse_openapi_spec(write_spec("petstore.json", petstore))
        assert result.ok
        assert result.spec.base_url == "https://petstore.example.com/v1/"

    @pytest.mark.asyncio
    async def test_swagger_document_is_applicable(self, write_spec):
        result = await parse_openapi_spec(
            write_spec("legacy.yaml", {"swagger": "2.0", "info": {"title": "x"}, "paths": {}})
        )
        assert result.status == CompileStatus.COMPILED
        assert result.spec.tools == []

    @pytest.mark.asyncio
    async def test_non_description_document_is_not_applicable(self, write_spec):
        result = await parse_openapi_spec(write_spec("config.yaml", {"name": "something else"}))

        assert result.status == CompileStatus.NOT_APPLICABLE
        assert result.spec is None

    @pytest.mark.asyncio
    async def test_invalid_syntax_is_parse_failure(self, write_spec):
        result = await parse_openapi_spec(write_spec("broken-api.json", "{not json"))

        assert result.status == CompileStatus.PARSE_FAILED
        assert result.error

    @pytest.mark.asyncio
    async def test_malformed_structure_is_parse_failure(self, write_spec):
        result = await parse_openapi_spec(
            write_spec("openapi-bad.yaml", {"openapi": "3.0.0", "info": {}, "paths": ["x"]})
        )
        assert result.status == CompileStatus.PARSE_FAILED

    @pytest.mark.asyncio
    async def test_missing_info_is_parse_failure(self, write_spec):
        result = await parse_openapi_spec(write_spec("noinfo.yaml", {"openapi": "3.0.0", "paths": {}}))
        assert result.status == CompileStatus.PARSE_FAILED

    @pytest.mark.asyncio
    async def test_missing_file_is_parse_failure(self, specs_dir):
        result = await parse_openapi_spec(specs_dir / "gone.yaml")
        assert result.status == CompileStatus.PARSE_FAILED
