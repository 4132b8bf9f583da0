# vaultguard/abis.py

# ABI for the VaultGuard registry (ERC-721, one token per will)
registry_abi = '''
[
  {
    "anonymous": false,
    "inputs": [
      { "indexed": true, "internalType": "address", "name": "from", "type": "address" },
      { "indexed": true, "internalType": "address", "name": "to", "type": "address" },
      { "indexed": true, "internalType": "uint256", "name": "tokenId", "type": "uint256" }
    ],
    "name": "Transfer",
    "type": "event"
  },
  {
    "anonymous": false,
    "inputs": [
      { "indexed": true, "internalType": "uint256", "name": "tokenId", "type": "uint256" },
      { "indexed": true, "internalType": "address", "name": "owner", "type": "address" },
      { "indexed": false, "internalType": "uint256", "name": "deadline", "type": "uint256" }
    ],
    "name": "WillCreated",
    "type": "event"
  },
  {
    "anonymous": false,
    "inputs": [
      { "indexed": true, "internalType": "uint256", "name": "tokenId", "type": "uint256" }
    ],
    "name": "WillTriggered",
    "type": "event"
  },
  {
    "anonymous": false,
    "inputs": [
      { "indexed": true, "internalType": "uint256", "name": "tokenId", "type": "uint256" },
      { "indexed": false, "internalType": "bytes32", "name": "decryptedHash", "type": "bytes32" }
    ],
    "name": "WillExecuted",
    "type": "event"
  },
  {
    "inputs": [
      { "internalType": "uint256", "name": "deadline", "type": "uint256" },
      { "internalType": "address[]", "name": "nominees", "type": "address[]" },
      { "internalType": "bytes32", "name": "encryptedHash", "type": "bytes32" }
    ],
    "name": "createWill",
    "outputs": [
      { "internalType": "uint256", "name": "", "type": "uint256" }
    ],
    "stateMutability": "nonpayable",
    "type": "function"
  },
  {
    "inputs": [
      { "internalType": "uint256", "name": "tokenId", "type": "uint256" }
    ],
    "name": "getWill",
    "outputs": [
      { "internalType": "uint256", "name": "deadline", "type": "uint256" },
      { "internalType": "bool", "name": "triggered", "type": "bool" },
      { "internalType": "address[]", "name": "nominees", "type": "address[]" },
      { "internalType": "bytes32", "name": "encryptedHash", "type": "bytes32" },
      { "internalType": "bytes32", "name": "decryptedHash", "type": "bytes32" },
      { "internalType": "bool", "name": "executed", "type": "bool" }
    ],
    "stateMutability": "view",
    "type": "function"
  },
  {
    "inputs": [
      { "internalType": "uint256", "name": "tokenId", "type": "uint256" }
    ],
    "name": "ownerOf",
    "outputs": [
      { "internalType": "address", "name": "", "type": "address" }
    ],
    "stateMutability": "view",
    "type": "function"
  }
]
'''

# Event signatures the submitter and the log decoder care about
event_signature_texts = {
    "Transfer": "Transfer(address,address,uint256)",
    "WillCreated": "WillCreated(uint256,address,uint256)",
    "WillTriggered": "WillTriggered(uint256)",
    "WillExecuted": "WillExecuted(uint256,bytes32)",
}

# Events that announce a newly minted will, in order of preference
creation_events = ("Transfer", "WillCreated")
