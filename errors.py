class HuffmanError(Exception): # base for every error raised by the Huffman modules
    pass


class InvalidInput(HuffmanError, ValueError): # bad frequency table or unknown symbol
    pass


class InvalidState(HuffmanError, RuntimeError): # operating on an empty or unusable tree
    pass


class FormatError(HuffmanError, ValueError): # malformed code file
    pass


class TruncatedStream(HuffmanError, EOFError): # bits ran out in the middle of a code
    pass


class UnknownCode(HuffmanError, ValueError): # bit sequence leads to an empty branch
    pass
