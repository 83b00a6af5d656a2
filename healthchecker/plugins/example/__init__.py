from healthchecker.plugins.example.plugin import CustomConfigCheck, ExamplePlugin, ThirdPartyServiceCheck

__all__ = ["CustomConfigCheck", "ExamplePlugin", "ThirdPartyServiceCheck"]
