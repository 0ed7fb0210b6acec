"""Tests for port resolution."""

import socket
import subprocess
from unittest.mock import Mock

import pytest

from uds.errors import PortExhausted, PortInUse
from uds.models.config import PortConfig
from uds.providers.port import PortResolver
from uds.utils.process import CommandResult


NETSTAT_OUTPUT = """Active Internet connections (only servers)
Proto Recv-Q Send-Q Local Address           Foreign Address         State
tcp        0      0 0.0.0.0:8080            0.0.0.0:*               LISTEN
tcp        0      0 127.0.0.1:8081          0.0.0.0:*               LISTEN
tcp6       0      0 :::5432                 :::*                    LISTEN
"""

SS_OUTPUT = """Netid State  Recv-Q Send-Q Local Address:Port  Peer Address:Port
tcp   LISTEN 0      128    0.0.0.0:3000        0.0.0.0:*
"""


def netstat_resolver(output=NETSTAT_OUTPUT, config=None):
    """Resolver whose only scanner is netstat returning ``output``."""
    runner = Mock(return_value=CommandResult(returncode=0, stdout=output))
    which = Mock(side_effect=lambda tool: "/bin/netstat" if tool == "netstat" else None)
    return PortResolver(config, runner=runner, which=which)


class TestPortAvailability:
    """Test is_port_available."""
    
    def test_netstat_scan(self):
        resolver = netstat_resolver()
        
        assert resolver.is_port_available(8080) is False
        assert resolver.is_port_available(8081) is False
        assert resolver.is_port_available(5432) is False
        assert resolver.is_port_available(9000) is True
        resolver.runner.assert_called_with(["netstat", "-tuln"], check=False, timeout=10)
        
    def test_ss_scan(self):
        runner = Mock(return_value=CommandResult(returncode=0, stdout=SS_OUTPUT))
        which = Mock(side_effect=lambda tool: "/bin/ss" if tool == "ss" else None)
        resolver = PortResolver(runner=runner, which=which)
        
        assert resolver.is_port_available(3000) is False
        assert resolver.is_port_available(3001) is True
        
    def test_failed_scanner_falls_through(self):
        """Test a scanner that errors gives way to the next one."""
        def runner(cmd, **kwargs):
            if cmd[0] == "netstat":
                raise subprocess.TimeoutExpired(cmd, 10)
            return CommandResult(returncode=0, stdout=SS_OUTPUT)
            
        resolver = PortResolver(runner=runner, which=lambda tool: f"/bin/{tool}")
        
        assert resolver.is_port_available(3000) is False
        
    def test_connect_probe_fallback(self):
        """Test the connect probe is used when no scanner is installed."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]
        resolver = PortResolver(
            PortConfig(host="127.0.0.1"),
            runner=Mock(),
            which=lambda tool: None,
        )
        
        try:
            assert resolver.is_port_available(port) is False
        finally:
            server.close()
            
        assert resolver.is_port_available(port) is True
        resolver.runner.assert_not_called()


class TestFindAvailablePort:
    """Test find_available_port."""
    
    def test_first_free(self):
        resolver = netstat_resolver()
        
        assert resolver.find_available_port(8080) == 8082
        
    def test_increment(self):
        resolver = netstat_resolver()
        
        assert resolver.find_available_port(8080, increment=10) == 8090
        
    def test_base_free(self):
        resolver = netstat_resolver()
        
        assert resolver.find_available_port(9000) == 9000
        
    def test_exhausted(self):
        resolver = netstat_resolver()
        
        with pytest.raises(PortExhausted) as exc_info:
            resolver.find_available_port(8080, max_port=8081)
            
        assert exc_info.value.base_port == 8080
        assert exc_info.value.max_port == 8081
        
    def test_bad_increment(self):
        resolver = netstat_resolver()
        
        with pytest.raises(ValueError):
            resolver.find_available_port(8080, increment=0)


class TestResolvePortConflict:
    """Test resolve_port_conflict and resolve_port_mapping."""
    
    def test_free_port_unchanged(self):
        resolver = netstat_resolver()
        
        assert resolver.resolve_port_conflict(9000) == 9000
        
    def test_auto_assign(self, caplog):
        resolver = netstat_resolver()
        
        assert resolver.resolve_port_conflict(8080, auto_assign=True) == 8082
        assert "Using alternative port: 8082" in caplog.text
        
    def test_auto_assign_from_config(self):
        resolver = netstat_resolver(config=PortConfig(auto_assign=True))
        
        assert resolver.resolve_port_conflict(8080) == 8082
        
    def test_conflict_without_auto_assign(self):
        resolver = netstat_resolver(config=PortConfig(auto_assign=False))
        
        with pytest.raises(PortInUse) as exc_info:
            resolver.resolve_port_conflict(8080)
            
        assert exc_info.value.port == 8080
        
    def test_conflict_reports_owner(self):
        def runner(cmd, **kwargs):
            if cmd[0] == "lsof":
                return CommandResult(returncode=0, stdout="nginx 123 root 6u IPv4 TCP *:8080 (LISTEN)\n")
            return CommandResult(returncode=0, stdout=NETSTAT_OUTPUT)
            
        resolver = PortResolver(
            PortConfig(auto_assign=False),
            runner=runner,
            which=lambda tool: f"/bin/{tool}" if tool in ("netstat", "lsof") else None,
        )
        
        with pytest.raises(PortInUse) as exc_info:
            resolver.resolve_port_conflict(8080)
            
        assert "nginx 123" in exc_info.value.owner
        
    def test_auto_assign_exhausted(self):
        resolver = netstat_resolver(config=PortConfig(max_port=8081))
        
        with pytest.raises(PortExhausted):
            resolver.resolve_port_conflict(8080, auto_assign=True)
            
    def test_resolve_mapping(self):
        resolver = netstat_resolver()
        
        assert resolver.resolve_port_mapping("9000:80") == "9000:80"
        assert resolver.resolve_port_mapping("8080:80", auto_assign=True) == "8082:80"
        assert resolver.resolve_port_mapping("8080", auto_assign=True) == "8082:8080"


class TestFindPortOwner:
    """Test find_port_owner."""
    
    def test_filters_netstat_output(self):
        output = (
            "tcp 0 0 0.0.0.0:8080 0.0.0.0:* LISTEN 123/nginx\n"
            "tcp 0 0 0.0.0.0:5432 0.0.0.0:* LISTEN 456/postgres\n"
        )
        resolver = netstat_resolver(output)
        
        assert resolver.find_port_owner(8080) == "tcp 0 0 0.0.0.0:8080 0.0.0.0:* LISTEN 123/nginx"
        
    def test_no_tools(self):
        resolver = PortResolver(runner=Mock(), which=lambda tool: None)
        
        assert resolver.find_port_owner(8080) is None
