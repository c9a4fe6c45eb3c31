"""
ZUSD Trove SDK - Contract ABIs (minimal)

Only the entries the SDK calls. Full artifacts are produced by the
contracts build and are not needed client-side.
"""

SORTED_TROVES_ABI = [
    {
        "name": "getSize",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_id", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}]
    },
    {
        "name": "findInsertPosition",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_NICR", "type": "uint256"},
            {"name": "_prevId", "type": "address"},
            {"name": "_nextId", "type": "address"}
        ],
        "outputs": [
            {"name": "", "type": "address"},
            {"name": "", "type": "address"}
        ]
    }
]

HINT_HELPERS_ABI = [
    {
        "name": "getApproxHint",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_CR", "type": "uint256"},
            {"name": "_numTrials", "type": "uint256"},
            {"name": "_inputRandomSeed", "type": "uint256"}
        ],
        "outputs": [
            {"name": "hintAddress", "type": "address"},
            {"name": "diff", "type": "uint256"},
            {"name": "latestRandomSeed", "type": "uint256"}
        ]
    },
    {
        "name": "getRedemptionHints",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_ZUSDamount", "type": "uint256"},
            {"name": "_price", "type": "uint256"},
            {"name": "_maxIterations", "type": "uint256"}
        ],
        "outputs": [
            {"name": "firstRedemptionHint", "type": "address"},
            {"name": "partialRedemptionHintNICR", "type": "uint256"},
            {"name": "truncatedZUSDamount", "type": "uint256"}
        ]
    }
]

TROVE_MANAGER1_ABI = [
    {
        "name": "ZUSD_GAS_COMPENSATION",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}]
    },
    {
        "name": "getTroveDebt",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_borrower", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}]
    }
]

TROVE_MANAGER2_ABI = [
    {
        "name": "getBorrowingFeeWithDecay",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_ZUSDDebt", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}]
    },
    {
        "name": "redeemCollateral",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_ZUSDamount", "type": "uint256"},
            {"name": "_firstRedemptionHint", "type": "address"},
            {"name": "_upperPartialRedemptionHint", "type": "address"},
            {"name": "_lowerPartialRedemptionHint", "type": "address"},
            {"name": "_partialRedemptionHintNICR", "type": "uint256"},
            {"name": "_maxIterations", "type": "uint256"},
            {"name": "_maxFeePercentage", "type": "uint256"}
        ],
        "outputs": []
    }
]

TROVE_MANAGER3_ABI = [
    {
        "name": "liquidateTroves",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_n", "type": "uint256"}
        ],
        "outputs": []
    }
]

# PriceFeedTestnet: one price per collateral index, settable by the owner
PRICE_FEED_ABI = [
    {
        "name": "getPrice",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_id", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}]
    },
    {
        "name": "fetchEntirePrice",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256[]"}]
    },
    {
        "name": "setPrice",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_prices", "type": "uint256[]"}],
        "outputs": [{"name": "", "type": "bool"}]
    },
    {
        "name": "setTokenPrice",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_id", "type": "uint256"},
            {"name": "_price", "type": "uint256"}
        ],
        "outputs": [{"name": "", "type": "bool"}]
    }
]

BORROWER_OPERATIONS_ABI = [
    {
        "name": "openTrovewithEth",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "_maxFeePercentage", "type": "uint256"},
            {"name": "_ZUSDAmount", "type": "uint256"},
            {"name": "_upperHint", "type": "address"},
            {"name": "_lowerHint", "type": "address"}
        ],
        "outputs": []
    },
    {
        "name": "openTrovewithTokens",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_maxFeePercentage", "type": "uint256"},
            {"name": "_id", "type": "uint256"},
            {"name": "_amount", "type": "uint256"},
            {"name": "_ZUSDAmount", "type": "uint256"},
            {"name": "_upperHint", "type": "address"},
            {"name": "_lowerHint", "type": "address"}
        ],
        "outputs": []
    }
]

ERC20_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}]
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"}
        ],
        "outputs": [{"name": "", "type": "bool"}]
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"}
        ],
        "outputs": [{"name": "", "type": "uint256"}]
    }
]
