from gridspot.parsing.response_parser import ParsedResponse, parse_model_response, strip_code_fences

__all__ = ["ParsedResponse", "parse_model_response", "strip_code_fences"]
