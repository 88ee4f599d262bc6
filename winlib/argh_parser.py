import argh


class CustomArghParser(argh.ArghParser):
    """
    Modify the argh parser to accept hyphens or underscores in option names
    """

    def _parse_optional(self, arg_string):
        # normalize the option name - replace hyphens with underscores
        if (
            arg_string
            and len(arg_string) > 2
            and arg_string[0] in self.prefix_chars
            and arg_string[1] in self.prefix_chars
        ):
            option, sep, value = arg_string[2:].partition("=")
            arg_string = "--" + option.replace("-", "_") + sep + value
        return super()._parse_optional(arg_string)
