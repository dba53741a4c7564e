import pytest

from identity_register.core.descriptors import Ec2Credential, Endpoint, Tenant, User
from identity_register.core.keystone import DescriptorError
from identity_register.core.manifest import Manifest, load_manifest

MANIFEST = """\
tenants:
  - name: service
    description: Service Tenant
roles:
  - name: admin
services:
  - type: compute
    name: nova
endpoints:
  - region: RegionOne
    service_type: compute
    public_url: http://nova:8774/v2
    internal_url: http://nova:8774/v2
    admin_url: http://nova:8774/v2
users:
  - name: nova
    tenant: service
    password: secret
    enabled: false
role_grants:
  - user: nova
    tenant: service
    role: admin
ec2_credentials:
  - user: nova
    tenant: service
    admin_tenant: admin
    admin_user: admin
    admin_password: secret
    identity_endpoint: http://keystone:35357/v2.0
"""


class TestDescriptors:
    def test_optional_description(self):
        assert Tenant("tenant1").description is None
        assert Tenant("tenant1").enabled is True

    @pytest.mark.parametrize("kwargs", [
        {"name": "", "tenant_name": "t", "password": "p"},
        {"name": "u", "tenant_name": None, "password": "p"},
        {"name": "u", "tenant_name": "t", "password": "   "},
    ])
    def test_required_attributes(self, kwargs):
        with pytest.raises(DescriptorError):
            User(**kwargs)

    def test_enabled_must_be_boolean(self):
        with pytest.raises(DescriptorError, match="'enabled' must be a boolean"):
            Tenant("tenant1", enabled="yes")

    def test_endpoint_requires_all_urls(self):
        with pytest.raises(DescriptorError, match="admin_url"):
            Endpoint("RegionOne", "compute", "http://p", "http://i", None)

    def test_secrets_stay_out_of_repr(self):
        assert "password" not in repr(User("u", "t", "password"))
        ec2 = Ec2Credential("u", "t", "admin", "admin", "hunter2", "http://ks")
        assert "hunter2" not in repr(ec2)

    def test_descriptor_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            Tenant(None)


class TestManifest:
    def test_load_manifest(self, tmp_path):
        path = tmp_path / "identity.yaml"
        path.write_text(MANIFEST)

        manifest = load_manifest(path)

        assert manifest.tenants == [Tenant("service", "Service Tenant")]
        assert manifest.users[0].enabled is False
        assert manifest.ec2_credentials[0].identity_endpoint == "http://keystone:35357/v2.0"
        kinds = [type(d).__name__ for d in manifest.ordered()]
        assert kinds == ["Tenant", "Role", "Service", "Endpoint", "User", "RoleGrant", "Ec2Credential"]

    def test_empty_manifest(self):
        assert list(Manifest.from_dict(None).ordered()) == []

    def test_unknown_section(self):
        with pytest.raises(DescriptorError, match="Unknown manifest section"):
            Manifest.from_dict({"projects": []})

    def test_section_must_be_list(self):
        with pytest.raises(DescriptorError, match="must be a list"):
            Manifest.from_dict({"roles": {"name": "admin"}})

    def test_entry_must_be_mapping(self):
        with pytest.raises(DescriptorError, match=r"roles\[0\] must be a mapping"):
            Manifest.from_dict({"roles": ["admin"]})

    def test_missing_attribute_in_entry(self):
        with pytest.raises(DescriptorError, match="requires a non-empty 'password'"):
            Manifest.from_dict({"users": [{"name": "nova", "tenant": "service"}]})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("tenants: [name: : :\n")
        with pytest.raises(DescriptorError, match="Invalid manifest"):
            load_manifest(path)
