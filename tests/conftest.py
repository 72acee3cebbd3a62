"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_config_xml():
    """Return a sample valid XML configuration string."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<pybu bootstrap="bootstrap.py" verbose="true" colors="no">
  <runtime>
    <includePath>lib</includePath>
    <includePath></includePath>
    <includePath>/usr/share/pybu</includePath>
    <ini name="memory_limit" value="128M"/>
    <ini name="max_execution_time" value="0"/>
    <ini name="memory_limit" value="256M"/>
  </runtime>
  <logging>
    <log type="json" target="logs/backup.json"/>
    <log type="mail">
      <option name="recipients" value="admin@example.com"/>
      <option name="target" value="mail.log"/>
    </log>
  </logging>
  <backups>
    <backup name="database" stopOnError="true">
      <source type="mysql">
        <option name="databases" value="dbname"/>
        <option name="tables" value=""/>
      </source>
      <target dirname="backup" filename="x.sql" compress="bzip2"/>
      <check type="sizemin" value="10M"/>
      <sync type="rsync" skipOnCheckFail="false">
        <option name="user" value="backup"/>
      </sync>
      <sync type="sftp">
        <option name="host" value="backup.example.com"/>
      </sync>
    </backup>
    <backup name="files">
      <source type="tar">
        <option name="path" value="/var/www"/>
      </source>
      <target dirname="/mnt/backup" filename="www-%Y%m%d.tar" compress=""/>
      <cleanup type="quantity" skipOnSyncFail="false">
        <option name="amount" value="50"/>
      </cleanup>
    </backup>
  </backups>
</pybu>
"""


@pytest.fixture
def minimal_config_xml():
    """Return a minimal valid XML configuration string."""
    return """<pybu>
  <backups>
    <backup>
      <source type="mysql"/>
      <target dirname="backup" filename="x.sql"/>
    </backup>
  </backups>
</pybu>
"""


@pytest.fixture
def write_config(tmp_config_dir):
    """Return a helper writing XML content to a config file."""

    def _write(content, name="pybu.xml"):
        config_path = tmp_config_dir / name
        config_path.write_text(content)
        return config_path

    return _write


@pytest.fixture
def config_file(write_config, sample_config_xml):
    """Create a temporary config file with sample content."""
    return write_config(sample_config_xml)


@pytest.fixture
def minimal_config_file(write_config, minimal_config_xml):
    """Create a temporary config file with minimal content."""
    return write_config(minimal_config_xml, "minimal.xml")
